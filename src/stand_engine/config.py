"""Engine configuration bundle, optionally loaded from a JSON file."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Type, TypeVar, Union

from .contracts import StandType
from .geometry import GeometryConfig
from .layout import LayoutConfig
from .normalize import NormalizerDefaults
from .validate import ValidationConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigError(ValueError):
    """Malformed engine configuration."""


@dataclass(frozen=True)
class EngineConfig:
    normalizer: NormalizerDefaults = field(default_factory=NormalizerDefaults)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    geometry: GeometryConfig = field(default_factory=GeometryConfig)

    @property
    def layout(self) -> LayoutConfig:
        return self.geometry.layout

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "EngineConfig":
        unknown = set(payload) - {"normalizer", "validation", "geometry"}
        if unknown:
            raise ConfigError(f"Unknown config sections: {sorted(unknown)}")

        normalizer_raw = dict(payload.get("normalizer", {}) or {})
        if "stand_type" in normalizer_raw:
            try:
                normalizer_raw["stand_type"] = StandType(normalizer_raw["stand_type"])
            except ValueError as exc:
                raise ConfigError(str(exc)) from exc

        geometry_raw = dict(payload.get("geometry", {}) or {})
        layout = _section(LayoutConfig, geometry_raw.pop("layout", {}) or {}, "geometry.layout")

        return cls(
            normalizer=_section(NormalizerDefaults, normalizer_raw, "normalizer"),
            validation=_section(ValidationConfig, payload.get("validation", {}) or {}, "validation"),
            geometry=_section(GeometryConfig, dict(geometry_raw, layout=layout), "geometry"),
        )


def _section(cls: Type[T], values: Dict[str, Any], name: str) -> T:
    allowed = {f.name for f in fields(cls)}
    unknown = set(values) - allowed
    if unknown:
        raise ConfigError(f"Unknown keys in [{name}]: {sorted(unknown)}")
    return cls(**values)


def load_engine_config(path: Union[str, Path]) -> EngineConfig:
    config_path = Path(path)
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{config_path}: invalid JSON ({exc})") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"{config_path}: top level must be an object")
    config = EngineConfig.from_dict(payload)
    logger.info("Loaded engine config from %s", config_path)
    return config
