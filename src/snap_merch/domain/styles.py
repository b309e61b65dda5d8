"""Art style catalog."""

from dataclasses import dataclass
from typing import Literal

VehicleCategory = Literal[
    "pre1980-classic",
    "80s-90s",
    "truck",
    "jdm",
    "lowrider",
    "modern-sports",
    "default",
]


@dataclass(frozen=True)
class StyleConfig:
    """A single entry of the fixed style catalog."""

    id: str
    label: str
    emoji: str
    art_style: str
    color: str | None = None
    background_color: str | None = None


def _style(
    style_id: str, label: str, emoji: str, art_style: str, background: str
) -> StyleConfig:
    return StyleConfig(
        id=style_id,
        label=label,
        emoji=emoji,
        art_style=art_style,
        background_color=background,
    )


STYLE_CATALOG: tuple[StyleConfig, ...] = (
    _style("vector", "Vector", "🎯", "Vector (Monochromatic)", "#FFFFFF"),
    _style("retro", "Retro Poster", "🎨", "Vintage Poster", "#FFFFFF"),
    _style("calligram", "Typography", "✍️", "Distressed", "#FFFFFF"),
    _style("neon", "Neon Glow", "💡", "Neon Sign", "#000000"),
    _style("watercolor", "Watercolor", "🎨", "Watercolor", "#FFFFFF"),
    _style("comic", "Comic Book", "💥", "Comic Book", "#FFFFFF"),
    _style("blueprint", "Blueprint", "📐", "Blueprint Style", "#003366"),
    _style("pop-art", "Pop Art", "🎭", "Pop Art", "#FFFFFF"),
    _style("pencil", "Pencil Sketch", "✏️", "Pencil Sketch", "#FFFFFF"),
    _style("neon-80s", "80s Synthwave", "🌆", "Synthwave 80s", "#1a0033"),
    _style("lowrider", "Lowrider Art", "🔊", "Lowrider Airbrush", "#FFFFFF"),
    _style("japanese", "JDM Style", "🗾", "JDM Japanese", "#000000"),
)

STYLE_IDS: tuple[str, ...] = tuple(style.id for style in STYLE_CATALOG)

_BY_ID = {style.id: style for style in STYLE_CATALOG}


def get_style(style_id: str) -> StyleConfig | None:
    """Return the catalog entry for a style id, if present."""
    return _BY_ID.get(style_id)
