"""Rule-based vehicle categorization."""

import re

from snap_merch.domain.styles import VehicleCategory
from snap_merch.domain.vehicles import VehicleIdentity

JDM_MAKES = frozenset(
    {
        "honda",
        "toyota",
        "nissan",
        "subaru",
        "mazda",
        "mitsubishi",
        "lexus",
        "acura",
        "infiniti",
        "datsun",
    }
)

LOWRIDER_MAKES = frozenset(
    {
        "chevrolet",
        "chevy",
        "buick",
        "oldsmobile",
        "cadillac",
        "lincoln",
        "pontiac",
        "ford",
    }
)

LOWRIDER_MODELS = (
    "impala",
    "monte carlo",
    "regal",
    "cutlass",
    "el camino",
    "caprice",
    "fleetwood",
    "lacrosse",
    "riviera",
    "skylark",
    "lesabre",
    "deville",
    "town car",
    "crown victoria",
    "grand prix",
)

TRUCK_KEYWORDS = (
    "truck",
    "pickup",
    "f-150",
    "f-250",
    "f-350",
    "silverado",
    "sierra",
    "ram",
    "tundra",
    "titan",
    "tacoma",
    "frontier",
    "ranger",
    "colorado",
    "canyon",
    "ridgeline",
    "gladiator",
    "maverick",
    "raptor",
)

SPORTS_EXOTIC_MAKES = (
    "ferrari",
    "lamborghini",
    "porsche",
    "mclaren",
    "bugatti",
    "koenigsegg",
    "pagani",
    "aston martin",
    "lotus",
    "maserati",
)

SPORTS_MODELS = (
    "corvette",
    "camaro",
    "mustang",
    "supra",
    "gtr",
    "gt-r",
    "nsx",
    "rx-7",
    "rx7",
    "brz",
    "gr86",
    "86",
    "miata",
    "mx-5",
    "wrx",
    "sti",
    "evo",
    "lancer evolution",
    "challenger",
    "charger",
    "viper",
    "z06",
    "zr1",
    "shelby",
    "gt350",
    "gt500",
    "amg",
    "m3",
    "m4",
    "m5",
    "rs3",
    "rs5",
    "rs6",
    "rs7",
    "911",
    "cayman",
    "boxster",
    "panamera",
    "type r",
    "civic si",
    "s2000",
)

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


def classify_vehicle(identity: VehicleIdentity) -> VehicleCategory:  # noqa: PLR0911
    """Map a vehicle identity to a style category.

    Rules are checked in priority order and the first match wins, so a 1970
    Chevrolet Impala is a lowrider before it is a pre-1980 classic, and a 2021
    Toyota Supra is JDM before it is a modern sports car.
    """
    year = parse_year(identity.year)
    make = (identity.make or "").lower().strip()
    model = (identity.model or "").lower().strip()
    full_name = f"{make} {model}"

    if 1958 <= year <= 1985 and make in LOWRIDER_MAKES:
        if any(name in model for name in LOWRIDER_MODELS):
            return "lowrider"

    if make in JDM_MAKES:
        return "jdm"

    if any(keyword in full_name for keyword in TRUCK_KEYWORDS):
        return "truck"

    if year >= 2010:
        exotic_make = any(name in make for name in SPORTS_EXOTIC_MAKES)
        sports_model = any(name in model for name in SPORTS_MODELS)
        if exotic_make or sports_model:
            return "modern-sports"

    if 0 < year < 1980:
        return "pre1980-classic"

    if 1980 <= year <= 1999:
        return "80s-90s"

    return "default"


def parse_year(raw: str | None) -> int:
    """Parse the leading integer of a year string, defaulting to 0."""
    match = _LEADING_INT.match(raw or "")
    if match is None:
        return 0
    return int(match.group())
