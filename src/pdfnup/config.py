"""Configuration loading and validation for pdfnup."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from pdfnup.constants import (
    LETTER,
    MAX_UPLOAD_MB,
    PAGES_PER_SHEET,
    PREVIEW_MAX_SHEETS,
    PREVIEW_RENDER_SCALE,
    SPACING_FRACTIONS,
)
from pdfnup.exceptions import ConfigError


# ============================================================================
# Enums for constrained string values
# ============================================================================


class Layout(str, Enum):
    """Number of source pages tiled onto each output sheet."""

    TWO_UP = "2-up"
    FOUR_UP = "4-up"

    @property
    def pages_per_sheet(self) -> int:
        return PAGES_PER_SHEET[self.value]


class Spacing(str, Enum):
    """Margin presets, as a fraction of the sheet dimension."""

    SNUG = "snug"
    REGULAR = "regular"
    SPACIOUS = "spacious"

    @property
    def fraction(self) -> float:
        return SPACING_FRACTIONS[self.value]


class Orientation(str, Enum):
    """Output sheet orientation."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


class RasterizerBackend(str, Enum):
    """Available preview rasterizers."""

    PDF2IMAGE = "pdf2image"
    MOCK = "mock"


# ============================================================================
# Config dataclasses
# ============================================================================


@dataclass(frozen=True)
class ImpositionOptions:
    """The user's layout selection for one composition run."""
    layout: Layout = Layout.TWO_UP
    spacing: Spacing = Spacing.REGULAR
    orientation: Orientation = Orientation.LANDSCAPE


@dataclass
class PreviewConfig:
    """Preview rendering settings."""
    backend: RasterizerBackend = RasterizerBackend.PDF2IMAGE
    max_sheets: int = PREVIEW_MAX_SHEETS
    scale: float = PREVIEW_RENDER_SCALE
    poppler_path: Path | None = None


@dataclass
class UploadConfig:
    """Limits applied to incoming files."""
    max_size_mb: float = MAX_UPLOAD_MB

    @property
    def max_size_bytes(self) -> int:
        return int(self.max_size_mb * 1024 * 1024)


@dataclass
class StorageConfig:
    """Where the working document is kept between steps."""
    path: Path = Path("~/.pdfnup").expanduser()


@dataclass
class Config:
    """Root configuration object."""
    version: int = 1
    defaults: ImpositionOptions = field(default_factory=ImpositionOptions)
    # Base page size (portrait width, height); landscape sheets transpose it
    page_size: tuple[float | str, float | str] = LETTER
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def _parse_enum(enum_class: type[Enum], value: Any, field: str) -> Enum:
    """Parse a config value into an enum member.

    Raises:
        ConfigError: If the value is not a valid member, listing valid values.
    """
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(value)
    except ValueError:
        valid = ", ".join(e.value for e in enum_class)
        raise ConfigError(
            f"Invalid value '{value}' for '{field}'. Valid values are: {valid}",
            context={"field": field},
        ) from None


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping", context={"field": name})
    return section


def parse_options(data: dict[str, Any], base: ImpositionOptions | None = None) -> ImpositionOptions:
    """Parse layout/spacing/orientation, falling back to `base` for missing keys."""
    base = base or ImpositionOptions()
    return ImpositionOptions(
        layout=_parse_enum(Layout, data.get("layout", base.layout), "layout"),
        spacing=_parse_enum(Spacing, data.get("spacing", base.spacing), "spacing"),
        orientation=_parse_enum(Orientation, data.get("orientation", base.orientation), "orientation"),
    )


def parse_preview(data: dict[str, Any]) -> PreviewConfig:
    """Parse the preview section."""
    backend = _parse_enum(RasterizerBackend, data.get("backend", "pdf2image"), "preview.backend")

    max_sheets = data.get("max_sheets", PREVIEW_MAX_SHEETS)
    if not isinstance(max_sheets, int) or isinstance(max_sheets, bool) or max_sheets < 1:
        raise ConfigError(
            f"preview.max_sheets must be a positive integer, got {max_sheets!r}",
            context={"field": "preview.max_sheets"},
        )

    scale = data.get("scale", PREVIEW_RENDER_SCALE)
    if not isinstance(scale, (int, float)) or isinstance(scale, bool) or scale <= 0:
        raise ConfigError(
            f"preview.scale must be a positive number, got {scale!r}",
            context={"field": "preview.scale"},
        )

    poppler_path = data.get("poppler_path")
    return PreviewConfig(
        backend=backend,
        max_sheets=max_sheets,
        scale=float(scale),
        poppler_path=Path(poppler_path).expanduser() if poppler_path else None,
    )


def parse_page_size(value: Any) -> tuple[float | str, float | str]:
    """Parse the base page size as a (width, height) pair."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ConfigError(
            f"page_size must be a [width, height] pair, got {value!r}",
            context={"field": "page_size"},
        )
    return (value[0], value[1])


def load_config(config_path: Path | None = None) -> Config:
    """Load and validate a configuration file.

    Args:
        config_path: YAML file to read. If None, defaults are returned.
    """
    if config_path is None:
        return Config()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Configuration is not valid YAML: {e}") from e

    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML dictionary")

    upload = _section(data, "upload")
    max_size_mb = upload.get("max_size_mb", MAX_UPLOAD_MB)
    if not isinstance(max_size_mb, (int, float)) or max_size_mb <= 0:
        raise ConfigError(
            f"upload.max_size_mb must be a positive number, got {max_size_mb!r}",
            context={"field": "upload.max_size_mb"},
        )

    storage = _section(data, "storage")
    storage_config = StorageConfig()
    if "path" in storage:
        storage_config = StorageConfig(path=Path(storage["path"]).expanduser())

    return Config(
        version=data.get("version", 1),
        defaults=parse_options(_section(data, "defaults")),
        page_size=parse_page_size(data.get("page_size", list(LETTER))),
        preview=parse_preview(_section(data, "preview")),
        upload=UploadConfig(max_size_mb=max_size_mb),
        storage=storage_config,
    )
