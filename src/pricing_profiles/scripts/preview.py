#!/usr/bin/env python
from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from pricing_profiles.app.config.loader import load_service_config
from pricing_profiles.app.models.config import ServiceConfig
from pricing_profiles.app.models.profile import PricingProfileForm, validate_pricing_profile_form
from pricing_profiles.engine.canonical.io import write_csv_bytes
from pricing_profiles.engine.catalog.models import Product, build_filters, filter_products
from pricing_profiles.engine.catalog.selection import SCOPE_ALL, ProductSelectionStore
from pricing_profiles.engine.parsing.csv_parser import load_products_csv
from pricing_profiles.engine.pricing.preview import (
    build_pricing_table,
    compute_preview_batch,
    summarize_preview,
)
from pricing_profiles.util.errors import ConfigError, NonRetryableError
from pricing_profiles.util.logging import get_logger, log_event
from pricing_profiles.util.metrics import CloudWatchMetrics

logger = get_logger("pricing_profiles.preview")


def profile_slug(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")
    return slug or "profile"


def select_products(profile: PricingProfileForm, catalog: Sequence[Product]) -> List[Product]:
    store = ProductSelectionStore(
        initial_scope=profile.scope,
        all_product_ids=[product.id for product in catalog],
    )
    if profile.scope != SCOPE_ALL:
        for product_id in profile.product_ids:
            result = store.toggle(product_id)
            if not result.success:
                log_event(
                    logger,
                    "selection_rejected",
                    level=logging.WARNING,
                    profile=profile.name,
                    product_id=product_id,
                    error=result.error,
                )
    return store.selected_products(catalog)


def run_profile(
    profile: PricingProfileForm,
    *,
    catalog: Sequence[Product],
    config: ServiceConfig,
    output_dir: Path,
    metrics: CloudWatchMetrics,
) -> Optional[Path]:
    if profile.scope == SCOPE_ALL and not profile.product_ids:
        # scope "all" selects the whole filtered catalog
        profile = profile.model_copy(update={"product_ids": [product.id for product in catalog]})
    validation = validate_pricing_profile_form(profile, config.limits)
    if not validation.is_valid:
        log_event(
            logger,
            "profile_invalid",
            level=logging.WARNING,
            profile=profile.name,
            errors=validation.errors,
        )
        metrics.record_invalid_profile(profile_name=profile.name)
        return None

    selected = select_products(profile, catalog)
    rule = profile.to_rule()
    results = compute_preview_batch(selected, rule)
    rows = build_pricing_table(selected, results)
    summary = summarize_preview(results)

    output_path = output_dir / f"{profile_slug(profile.name)}_preview.csv"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = write_csv_bytes([row.model_dump() for row in rows], config.output.columns)
    output_path.write_bytes(payload)

    log_event(
        logger,
        "preview_generated",
        profile=profile.name,
        adjustment_type=rule.adjustment_type.value,
        adjustment_value=rule.adjustment_value,
        increment_type=rule.increment_type.value,
        rows=summary["rows"],
        errors=summary["errors"],
        output=str(output_path),
    )
    metrics.record_preview(profile_name=profile.name, rows=summary["rows"], errors=summary["errors"])
    return output_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Write pricing profile preview tables as CSV")
    parser.add_argument("--config", required=True, help="Path to service config YAML")
    parser.add_argument("--catalog", help="Product catalog CSV (overrides catalog.path)")
    parser.add_argument("--profile", help="Only preview the profile with this name")
    parser.add_argument("--search")
    parser.add_argument("--category")
    parser.add_argument("--sub-category", dest="sub_category")
    parser.add_argument("--segment")
    parser.add_argument("--brand")
    parser.add_argument("--sku")
    parser.add_argument("--output-dir", default="outputs")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    metrics = CloudWatchMetrics.from_env()

    try:
        config = load_service_config(args.config)
        catalog_path = args.catalog or config.catalog.path
        if not catalog_path:
            raise ConfigError("Provide --catalog or catalog.path")
        try:
            products, parse_errors = load_products_csv(
                catalog_path,
                column_map=config.catalog.column_map,
                encoding=config.catalog.encoding,
            )
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Unable to load catalog {catalog_path}: {exc}") from exc
    except ConfigError as exc:
        log_event(logger, "preview_failed", level=logging.ERROR, error=str(exc))
        return 2

    for error in parse_errors:
        log_event(
            logger,
            "catalog_row_invalid",
            level=logging.WARNING,
            row_number=error.row_number,
            reason=error.reason,
        )

    filters = build_filters(
        search=args.search,
        category=args.category,
        sub_category=args.sub_category,
        segment=args.segment,
        brand=args.brand,
        sku=args.sku,
    )
    catalog = filter_products(products, filters)

    profiles = config.profiles
    if args.profile:
        selected_profile = config.get_profile(args.profile)
        if selected_profile is None:
            log_event(logger, "profile_not_found", level=logging.ERROR, profile=args.profile)
            return 2
        profiles = [selected_profile]

    failed = False
    for profile in profiles:
        try:
            written = run_profile(
                profile,
                catalog=catalog,
                config=config,
                output_dir=Path(args.output_dir),
                metrics=metrics,
            )
        except (NonRetryableError, OSError) as exc:
            log_event(logger, "preview_failed", level=logging.ERROR, profile=profile.name, error=str(exc))
            written = None
        if written is None:
            failed = True
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
