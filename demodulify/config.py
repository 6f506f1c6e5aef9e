"""Configuration loading and validation for demodulify (.demodulify.yml)."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .invariants import first_violation

CONFIG_FILENAME = ".demodulify.yml"

_SEGMENT_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class BuildMode(str, Enum):
    """Controls which artifact kind is emitted."""

    GAS = "gas"
    UI = "ui"
    COMMON = "common"

    @property
    def extension(self) -> str:
        return ".html" if self is BuildMode.UI else ".gs"


class LogLevel(str, Enum):
    SILENT = "silent"
    INFO = "info"
    DEBUG = "debug"


class DemodulifyOptions(BaseModel):
    """Validated, defaulted plugin options.

    Keys are accepted in snake_case or in the camelCase spelling used by
    bundler configs (``namespaceRoot``, ``buildMode`` ...).
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    namespace_root: str = Field(default="DEFAULT", alias="namespaceRoot")
    subsystem: str = Field(default="DEFAULT")
    build_mode: BuildMode = Field(default=BuildMode.GAS, alias="buildMode")
    default_export_name: Optional[str] = Field(default=None, alias="defaultExportName")
    log_level: LogLevel = Field(default=LogLevel.INFO, alias="logLevel")

    @field_validator("namespace_root", "subsystem")
    @classmethod
    def _check_namespace_part(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be a non-empty string")
        for segment in value.split("."):
            if not _SEGMENT_PATTERN.match(segment):
                raise ValueError(
                    f"segment {segment!r} is not a valid identifier (expected [A-Za-z_$][A-Za-z0-9_$]*)"
                )
        return value

    @field_validator("default_export_name")
    @classmethod
    def _check_default_export_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if not _SEGMENT_PATTERN.match(value):
            raise ValueError(f"{value!r} is not a valid identifier")
        return value

    @property
    def namespace(self) -> str:
        return f"{self.namespace_root}.{self.subsystem}"


def resolve_options(data: Mapping[str, Any] | DemodulifyOptions | None = None) -> DemodulifyOptions:
    """Parse, validate, and default user-supplied options.

    Raises ConfigurationError with every failing field listed.
    """
    if isinstance(data, DemodulifyOptions):
        options = data
    else:
        try:
            options = DemodulifyOptions.model_validate(dict(data or {}))
        except ValidationError as exc:
            raise ConfigurationError(_format_validation_error(exc)) from exc

    probe = f"globalThis.{options.namespace}.probe = probe;"
    violation = first_violation(probe)
    if violation is not None:
        raise ConfigurationError(
            f"Namespace '{options.namespace}' collides with forbidden runtime pattern "
            f"'{violation.pattern}'; choose different namespaceRoot/subsystem segments"
        )
    return options


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load raw option values from a YAML config file.

    A directory argument looks for ``.demodulify.yml`` inside it. A missing
    file yields an empty mapping so defaults apply.
    """
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        return {}

    text = config_file.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {config_file.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{config_file.name} must contain a mapping at the root")
    return loaded


def merge_options(*layers: Mapping[str, Any] | None) -> DemodulifyOptions:
    """Validate the union of option layers; later layers win, None values are ignored."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is None:
                continue
            merged[_canonical_key(key)] = value
    return resolve_options(merged)


def _canonical_key(key: str) -> str:
    for name, field in DemodulifyOptions.model_fields.items():
        if key == field.alias:
            return name
    return key


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _format_validation_error(exc: ValidationError) -> str:
    problems: List[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "options"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "Invalid demodulify options: " + "; ".join(problems)


__all__ = [
    "BuildMode",
    "CONFIG_FILENAME",
    "DemodulifyOptions",
    "LogLevel",
    "load_config",
    "merge_options",
    "resolve_options",
]
