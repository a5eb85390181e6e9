from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import AnnotationSide, Size
from domain.services.placement_engine import Clearance, PlacementConfig

DEFAULT_CONFIG_PATH = Path("config/annotate.yaml")


class ClearanceSettings(BaseModel):
    vertical: float = Field(default=8.0, ge=0)
    horizontal: float = Field(default=5.0, ge=0)
    reflow: float = Field(default=5.0, ge=0)

    def to_clearance(self) -> Clearance:
        return Clearance(vertical=self.vertical, horizontal=self.horizontal, reflow=self.reflow)


class PlacementSettings(BaseModel):
    text: ClearanceSettings = ClearanceSettings()
    measurement: ClearanceSettings = ClearanceSettings(vertical=15.0, horizontal=12.0, reflow=4.0)
    edge_margin: float = Field(default=5.0, ge=0)
    min_region_extent: float = Field(default=2.0, ge=0)
    glyph_width: float = Field(default=40.0, gt=0)
    glyph_height: float = Field(default=20.0, gt=0)
    default_orientation: AnnotationSide = AnnotationSide.TOP

    @field_validator("default_orientation", mode="before")
    @classmethod
    def normalize_orientation(cls, value: object) -> str:
        return str(value).strip().lower() if value else AnnotationSide.TOP.value

    def to_config(self) -> PlacementConfig:
        return PlacementConfig(
            text_clearance=self.text.to_clearance(),
            measurement_clearance=self.measurement.to_clearance(),
            edge_margin=self.edge_margin,
            min_region_extent=self.min_region_extent,
            glyph_size=Size(self.glyph_width, self.glyph_height),
        )


class OutputSettings(BaseModel):
    plan_dir: Path = Path("data/plans")
    plan_suffix: str = ".plan.json"

    @field_validator("plan_suffix", mode="before")
    @classmethod
    def ensure_leading_dot(cls, value: object) -> str:
        raw = str(value or "").strip()
        if not raw:
            return ".plan.json"
        return raw if raw.startswith(".") else f".{raw}"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ANNOTATE_", env_nested_delimiter="__")

    placement: PlacementSettings = PlacementSettings()
    output: OutputSettings = OutputSettings()
    log_level: str = "WARNING"

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        return str(value).upper() if value else "WARNING"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("ANNOTATE_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
