from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from pricing_profiles.app.models.profile import PricingProfileForm, ProfileLimits
from pricing_profiles.engine.pricing.preview import PREVIEW_COLUMNS


class CatalogConfig(BaseModel):
    path: Optional[str] = None
    encoding: str = "utf-8"
    column_map: Dict[str, str] = Field(default_factory=dict)


class OutputConfig(BaseModel):
    format: str = "csv"
    columns: List[str] = Field(default_factory=lambda: list(PREVIEW_COLUMNS))


class ServiceConfig(BaseModel):
    schema_version: int = 1
    currency: str = "USD"
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    limits: ProfileLimits = Field(default_factory=ProfileLimits)
    output: OutputConfig = Field(default_factory=OutputConfig)
    profiles: List[PricingProfileForm] = Field(default_factory=list)

    def get_profile(self, name: str) -> Optional[PricingProfileForm]:
        wanted = name.strip().lower()
        for profile in self.profiles:
            if profile.name.strip().lower() == wanted:
                return profile
        return None
