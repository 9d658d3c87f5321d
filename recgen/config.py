"""Configuration loading for recgen (.recgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".recgen.yml"

_LAYOUTS = {"module", "bundle"}
_CYCLE_POLICIES = {"allow", "warn", "error"}


@dataclass
class NamingConfig:
    """How generated type names are derived from source type names."""

    record_suffix: str = "Record"
    immutable_prefix: str = "Immutable"
    merge_suffix: str = "SuperRecord"


@dataclass
class AccessorConfig:
    """Accessor-name prefixes stripped when deriving field names."""

    prefixes: List[str] = field(default_factory=lambda: ["get"])
    boolean_prefixes: List[str] = field(default_factory=lambda: ["is"])


@dataclass
class RenderConfig:
    """Renderer settings."""

    layout: str = "module"
    bundle_module: str = "records"
    templates_dir: Optional[Path] = None
    builtin_interfaces: List[str] = field(default_factory=lambda: ["object"])


@dataclass
class OutputConfig:
    """Where rendered sources are written."""

    directory: Optional[Path] = None
    overwrite: bool = False


@dataclass
class RecgenConfig:
    """Represents the settings defined in .recgen.yml."""

    root: Path
    naming: NamingConfig = field(default_factory=NamingConfig)
    accessors: AccessorConfig = field(default_factory=AccessorConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    cycles: str = "warn"
    workers: int = 1

    @property
    def output_directory(self) -> Path:
        return self.output.directory or (self.root / "generated")


def load_config(config_path: Path) -> RecgenConfig:
    """Load configuration from disk, returning defaults when the file is missing."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RecgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    naming = NamingConfig()
    naming_data = _as_dict(data.get("naming"))
    if naming_data:
        naming.record_suffix = _as_identifier(naming_data.get("record_suffix"), naming.record_suffix)
        naming.immutable_prefix = _as_identifier(naming_data.get("immutable_prefix"), naming.immutable_prefix)
        naming.merge_suffix = _as_identifier(naming_data.get("merge_suffix"), naming.merge_suffix)
        if not (naming.record_suffix or naming.immutable_prefix):
            raise ConfigError("naming.record_suffix and naming.immutable_prefix cannot both be empty")

    accessors = AccessorConfig()
    accessor_data = _as_dict(data.get("accessors"))
    if accessor_data:
        if "prefixes" in accessor_data:
            accessors.prefixes = _as_str_list(accessor_data.get("prefixes"))
        if "boolean_prefixes" in accessor_data:
            accessors.boolean_prefixes = _as_str_list(accessor_data.get("boolean_prefixes"))

    render = RenderConfig()
    render_data = _as_dict(data.get("render"))
    if render_data:
        layout = (_as_str(render_data.get("layout")) or render.layout).lower()
        if layout not in _LAYOUTS:
            raise ConfigError(f"render.layout must be one of {sorted(_LAYOUTS)}, got '{layout}'")
        render.layout = layout
        render.bundle_module = _as_str(render_data.get("bundle_module")) or render.bundle_module
        templates_dir = _as_str(render_data.get("templates_dir"))
        render.templates_dir = root / templates_dir if templates_dir else None
        if "builtin_interfaces" in render_data:
            render.builtin_interfaces = _as_str_list(render_data.get("builtin_interfaces"))

    output = OutputConfig()
    output_data = _as_dict(data.get("output"))
    if output_data:
        directory = _as_str(output_data.get("directory"))
        output.directory = root / directory if directory else None
        output.overwrite = _as_bool(output_data.get("overwrite")) or False

    cycles = (_as_str(data.get("cycles")) or "warn").lower()
    if cycles not in _CYCLE_POLICIES:
        raise ConfigError(f"cycles must be one of {sorted(_CYCLE_POLICIES)}, got '{cycles}'")

    workers = _as_int(data.get("workers"))
    if workers is None or workers < 1:
        workers = 1

    return RecgenConfig(
        root=root,
        naming=naming,
        accessors=accessors,
        render=render,
        output=output,
        cycles=cycles,
        workers=workers,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_identifier(value: Any, default: str) -> str:
    if value is None:
        return default
    text = _as_str(value)
    if text is None:
        return default
    text = text.strip()
    if text and not f"A{text}".isidentifier():
        raise ConfigError(f"'{text}' is not a valid identifier fragment")
    return text


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AccessorConfig",
    "CONFIG_FILENAME",
    "NamingConfig",
    "OutputConfig",
    "RecgenConfig",
    "RenderConfig",
    "load_config",
]
