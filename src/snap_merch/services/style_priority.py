"""Style ordering by predicted appeal for a vehicle."""

from collections.abc import Mapping, Sequence

from snap_merch.domain.styles import (
    STYLE_CATALOG,
    STYLE_IDS,
    StyleConfig,
    VehicleCategory,
    get_style,
)
from snap_merch.domain.vehicles import VehicleIdentity
from snap_merch.services.classifier import classify_vehicle

PRIORITY_MAP: dict[VehicleCategory, tuple[str, ...]] = {
    "pre1980-classic": (
        "retro",
        "pencil",
        "watercolor",
        "vector",
        "pop-art",
        "blueprint",
        "calligram",
        "neon",
        "comic",
        "lowrider",
        "neon-80s",
        "japanese",
    ),
    "80s-90s": (
        "neon-80s",
        "retro",
        "neon",
        "comic",
        "vector",
        "pop-art",
        "calligram",
        "watercolor",
        "pencil",
        "blueprint",
        "lowrider",
        "japanese",
    ),
    "truck": (
        "vector",
        "blueprint",
        "retro",
        "watercolor",
        "pencil",
        "calligram",
        "neon",
        "comic",
        "pop-art",
        "neon-80s",
        "lowrider",
        "japanese",
    ),
    "jdm": (
        "japanese",
        "neon",
        "comic",
        "neon-80s",
        "vector",
        "pop-art",
        "retro",
        "calligram",
        "watercolor",
        "pencil",
        "blueprint",
        "lowrider",
    ),
    "lowrider": (
        "lowrider",
        "pop-art",
        "retro",
        "neon",
        "calligram",
        "watercolor",
        "vector",
        "pencil",
        "comic",
        "blueprint",
        "neon-80s",
        "japanese",
    ),
    "modern-sports": (
        "neon",
        "vector",
        "comic",
        "neon-80s",
        "pop-art",
        "calligram",
        "retro",
        "blueprint",
        "watercolor",
        "pencil",
        "lowrider",
        "japanese",
    ),
    "default": (
        "vector",
        "retro",
        "neon",
        "comic",
        "calligram",
        "watercolor",
        "pop-art",
        "pencil",
        "blueprint",
        "neon-80s",
        "lowrider",
        "japanese",
    ),
}


def validate_priority_table(
    table: Mapping[str, Sequence[str]], style_ids: Sequence[str] = STYLE_IDS
) -> None:
    """Raise ValueError unless every row is a permutation of the catalog ids."""
    expected = sorted(style_ids)
    for category, order in table.items():
        if sorted(order) != expected:
            missing = sorted(set(style_ids) - set(order))
            duplicates = sorted({sid for sid in order if list(order).count(sid) > 1})
            raise ValueError(
                f"Priority row {category!r} is not a permutation of the catalog "
                f"(missing={missing}, duplicates={duplicates})"
            )


def order_styles(order: Sequence[str]) -> list[StyleConfig]:
    """Resolve style ids to catalog entries and append any left out."""
    ordered: list[StyleConfig] = []
    seen: set[str] = set()
    for style_id in order:
        style = get_style(style_id)
        if style is None or style_id in seen:
            continue
        ordered.append(style)
        seen.add(style_id)
    ordered.extend(style for style in STYLE_CATALOG if style.id not in seen)
    return ordered


def rank_styles(identity: VehicleIdentity) -> list[StyleConfig]:
    """Return every catalog style sorted by likely appeal for the vehicle."""
    return order_styles(PRIORITY_MAP[classify_vehicle(identity)])


validate_priority_table(PRIORITY_MAP)
