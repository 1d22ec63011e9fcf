"""Helpers for loading runtime configuration profiles."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import BackendError, ErrorCode
from .models import GlobalSettings, ProfileSettings, RuntimeConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "defaults.json"
DEFAULT_PROFILE = "default"

# used when config/defaults.json is not available, e.g. in an installed package;
# keep in sync with that file
BUILTIN_DEFAULTS: Dict[str, Any] = {
    "version": 1,
    "global": {
        "read_buffer_bytes": 1_048_576,
        "write_buffer_bytes": 1_048_576,
        "progress_every_lines": 100_000,
    },
    "profiles": {
        "default": {
            "description": "General line-oriented files; every line is kept",
            "lines_per_chunk": 1000,
            "skip_first": False,
        },
        "csv": {
            "description": "Delimited exports with a header row that should not be repeated into chunks",
            "lines_per_chunk": 10000,
            "skip_first": True,
        },
        "logs": {
            "description": "Large application logs split into coarse pieces",
            "lines_per_chunk": 100000,
            "skip_first": False,
        },
    },
}


@dataclass(slots=True)
class ConfigDocument:
    source: Path
    version: int
    global_settings: GlobalSettings
    profiles: Dict[str, ProfileSettings]


def load_runtime_config(
    profile: str = DEFAULT_PROFILE,
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> RuntimeConfig:
    """Load configuration JSON, validate it, and resolve a specific profile."""

    document = load_config_document(
        profile_name=profile,
        config_path=config_path,
        overrides=overrides,
    )
    return RuntimeConfig(global_settings=document.global_settings, profile=document.profiles[profile])


def load_config_document(
    *,
    profile_name: Optional[str] = None,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> ConfigDocument:
    cfg_path = config_path or DEFAULT_CONFIG_PATH
    if config_path is None and not cfg_path.exists():
        raw: Any = BUILTIN_DEFAULTS
    else:
        raw = _read_config_json(cfg_path)
    if not isinstance(raw, Mapping):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{cfg_path}' must contain an object")

    version = _require_positive_int(raw.get("version"), "version", cfg_path)
    global_section = raw.get("global")
    if not isinstance(global_section, Mapping):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'global' section missing in {cfg_path}")

    overrides = overrides or {}
    global_data = {**global_section, **(overrides.get("global") or {})}
    global_settings = _build_global_settings(global_data, cfg_path)

    profiles_section = raw.get("profiles")
    if not isinstance(profiles_section, Mapping) or not profiles_section:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'profiles' section missing in {cfg_path}")

    profile_overrides = overrides.get("profile") or {}
    profiles: Dict[str, ProfileSettings] = {}
    for name, profile_data in profiles_section.items():
        if not isinstance(profile_data, Mapping):
            raise BackendError(
                ErrorCode.CONFIG_ERROR,
                f"Profile '{name}' must be an object in {cfg_path}",
            )
        merged = dict(profile_data)
        if profile_name and name == profile_name and profile_overrides:
            merged = {**merged, **profile_overrides}
        profiles[name] = _build_profile_settings(name, merged, cfg_path)

    if profile_name and profile_name not in profiles:
        available = ", ".join(sorted(profiles))
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{profile_name}' not found in {cfg_path}. Available: {available}",
        )

    return ConfigDocument(
        source=cfg_path,
        version=version,
        global_settings=global_settings,
        profiles=profiles,
    )


def require_lines_per_chunk(value: Any) -> int:
    """Validate a lines-per-chunk value supplied by a caller."""

    return _require_positive_int(value, "lines_per_chunk", None)


# ---------------------------------------------------------------------------
# Internal helpers


def _read_config_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' not found") from exc
    except json.JSONDecodeError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' is not valid JSON: {exc}") from exc


def _build_global_settings(data: Mapping[str, Any], source: Path) -> GlobalSettings:
    defaults = GlobalSettings()
    return GlobalSettings(
        read_buffer_bytes=_require_positive_int(
            data.get("read_buffer_bytes", defaults.read_buffer_bytes), "global.read_buffer_bytes", source
        ),
        write_buffer_bytes=_require_positive_int(
            data.get("write_buffer_bytes", defaults.write_buffer_bytes), "global.write_buffer_bytes", source
        ),
        progress_every_lines=_require_positive_int(
            data.get("progress_every_lines", defaults.progress_every_lines),
            "global.progress_every_lines",
            source,
        ),
    )


def _build_profile_settings(name: str, data: Mapping[str, Any], source: Path) -> ProfileSettings:
    prefix = f"profiles.{name}"
    required_fields = ("description", "lines_per_chunk")
    missing = [field for field in required_fields if field not in data]
    if missing:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{name}' missing fields {missing} in {source}",
        )

    return ProfileSettings(
        description=_require_string(data.get("description"), f"{prefix}.description", source),
        lines_per_chunk=_require_positive_int(data.get("lines_per_chunk"), f"{prefix}.lines_per_chunk", source),
        skip_first=_require_bool(data.get("skip_first", False), f"{prefix}.skip_first", source),
    )


def _where(source: Optional[Path]) -> str:
    return f" in {source}" if source else ""


def _require_string(value: Any, field: str, source: Path) -> str:
    if not isinstance(value, str):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be a string in {source}")
    text = value.strip()
    if not text:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be non-empty in {source}")
    return text


def _require_bool(value: Any, field: str, source: Path) -> bool:
    if not isinstance(value, bool):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be true or false in {source}")
    return value


def _require_positive_int(value: Any, field: str, source: Optional[Path]) -> int:
    # bool is an int subclass; "true" is never a line count
    if isinstance(value, bool) or isinstance(value, float) and not value.is_integer():
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be an integer{_where(source)}")
    try:
        num = int(value)
    except (TypeError, ValueError) as exc:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be an integer{_where(source)}",
        ) from exc
    if num <= 0:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be greater than zero{_where(source)}",
        )
    return num
