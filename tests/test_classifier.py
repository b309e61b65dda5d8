"""Tests for vehicle categorization."""

import pytest

from snap_merch.domain.vehicles import VehicleColor, VehicleIdentity
from snap_merch.services.classifier import classify_vehicle, parse_year


def _identity(year: str, make: str, model: str) -> VehicleIdentity:
    return VehicleIdentity(
        year=year,
        make=make,
        model=model,
        trim="",
        color=VehicleColor(name="Black", hex="#000000"),
    )


@pytest.mark.parametrize(
    ("year", "make", "model", "expected"),
    [
        ("1970", "Chevrolet", "Impala", "lowrider"),
        ("1984", "Buick", "Regal", "lowrider"),
        ("1994", "Toyota", "Supra", "jdm"),
        ("2021", "Toyota", "GR Supra", "jdm"),
        ("2019", "Ford", "F-150 Raptor", "truck"),
        ("2005", "Chevrolet", "Silverado", "truck"),
        ("2022", "Ford", "Mustang GT", "modern-sports"),
        ("2015", "Porsche", "Macan", "modern-sports"),
        ("1967", "Ford", "Mustang", "pre1980-classic"),
        ("1992", "BMW", "325i", "80s-90s"),
        ("2018", "Volvo", "XC90", "default"),
        ("Unknown", "Kia", "Soul", "default"),
    ],
)
def test_classify_vehicle(year: str, make: str, model: str, expected: str) -> None:
    assert classify_vehicle(_identity(year, make, model)) == expected


def test_lowrider_needs_year_window() -> None:
    assert classify_vehicle(_identity("1995", "Chevrolet", "Impala SS")) == "80s-90s"
    assert classify_vehicle(_identity("1957", "Chevrolet", "Bel Air")) == (
        "pre1980-classic"
    )


def test_placeholder_identity_is_default() -> None:
    assert classify_vehicle(_identity("?", "Unknown", "Vehicle")) == "default"


def test_classification_ignores_case_and_whitespace() -> None:
    assert classify_vehicle(_identity(" 1972 ", "  CHEVY ", "MONTE CARLO")) == (
        "lowrider"
    )


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1994", 1994), ("1994-1996", 1994), ("  2001 ", 2001), ("?", 0), ("", 0)],
)
def test_parse_year(raw: str, expected: int) -> None:
    assert parse_year(raw) == expected
