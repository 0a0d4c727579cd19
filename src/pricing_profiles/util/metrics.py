from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from pricing_profiles.util.logging import get_logger


@dataclass(frozen=True)
class MetricDimension:
    name: str
    value: str


class CloudWatchMetrics:
    def __init__(self, *, namespace: str, enabled: bool) -> None:
        self.namespace = namespace
        self.enabled = enabled
        self.client = boto3.client("cloudwatch") if enabled else None
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def from_env(cls) -> "CloudWatchMetrics":
        enabled = os.getenv("CLOUDWATCH_METRICS_ENABLED", "false").lower() == "true"
        namespace = os.getenv("CLOUDWATCH_METRICS_NAMESPACE", "PricingProfiles")
        return cls(namespace=namespace, enabled=enabled)

    def _put_metrics(
        self,
        metrics: Iterable[tuple[str, float]],
        *,
        unit: str = "Count",
        dimensions: Optional[Iterable[MetricDimension]] = None,
    ) -> None:
        if not self.enabled or not self.client:
            return
        dimension_payload = [
            {"Name": dimension.name, "Value": dimension.value} for dimension in dimensions or []
        ]
        metric_data = []
        for name, value in metrics:
            payload = {"MetricName": name, "Value": value, "Unit": unit}
            if dimension_payload:
                payload["Dimensions"] = dimension_payload
            metric_data.append(payload)
        try:
            self.client.put_metric_data(Namespace=self.namespace, MetricData=metric_data)
        except (BotoCoreError, ClientError) as exc:
            names = ",".join(item["MetricName"] for item in metric_data)
            self.logger.warning("cloudwatch_metric_failed", extra={"error": str(exc), "metric": names})

    def record_preview(self, *, profile_name: str, rows: int, errors: int) -> None:
        self._put_metrics(
            [("PreviewRows", float(rows)), ("PreviewErrors", float(errors))],
            dimensions=[MetricDimension(name="profile", value=profile_name)],
        )

    def record_invalid_profile(self, *, profile_name: str) -> None:
        self._put_metrics(
            [("InvalidProfile", 1.0)],
            dimensions=[MetricDimension(name="profile", value=profile_name)],
        )
