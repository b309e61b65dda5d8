"""Tests for vehicle identification."""

import asyncio
import threading

import pytest
from pydantic import ValidationError

from snap_merch.domain.vehicles import PLACEHOLDER_IDENTITY
from snap_merch.services import vehicles
from snap_merch.services.vehicles import (
    COLOR_PROMPT,
    FALLBACK_WARNING,
    VehicleService,
)
from tests.conftest import FakeVehicleIdentifier, make_image_data_url


def _service(client: FakeVehicleIdentifier) -> VehicleService:
    return VehicleService(
        client=client, model="gpt-5.2", reasoning_effort="low", store=False
    )


def test_identify_validates_and_strips() -> None:
    client = FakeVehicleIdentifier(
        result={
            "year": " 1994 ",
            "make": "Toyota ",
            "model": "Supra",
            "trim": "",
            "color": {"name": "Red", "hex": "#B3001B"},
        }
    )

    identity = asyncio.run(_service(client).identify(make_image_data_url(2400, 1200)))

    assert identity.year == "1994"
    assert identity.make == "Toyota"
    assert identity.display_name == "1994 Toyota Supra"
    assert client.calls[0]["image_data_url"].startswith("data:image/jpeg;base64,")


def test_identify_rejects_malformed_output() -> None:
    client = FakeVehicleIdentifier(result={"year": "1994"})

    with pytest.raises(ValidationError):
        asyncio.run(_service(client).identify(make_image_data_url()))


def test_identify_or_placeholder_on_failure() -> None:
    client = FakeVehicleIdentifier(error=RuntimeError("vision down"))

    identity, warning = asyncio.run(
        _service(client).identify_or_placeholder(make_image_data_url())
    )

    assert identity == PLACEHOLDER_IDENTITY
    assert warning == FALLBACK_WARNING


def test_identify_or_placeholder_on_success() -> None:
    identity, warning = asyncio.run(
        _service(FakeVehicleIdentifier()).identify_or_placeholder(
            make_image_data_url()
        )
    )

    assert identity.model == "Supra"
    assert warning is None


def test_identify_color_uses_known_vehicle_hint() -> None:
    client = FakeVehicleIdentifier(
        color_result={"name": " Super Red ", "hex": "#C8102E"}
    )

    color = asyncio.run(
        _service(client).identify_color(
            make_image_data_url(1600, 1600), "1994", "Toyota", "Supra"
        )
    )

    assert color.name == "Super Red"
    assert color.hex == "#C8102E"
    call = client.calls[0]
    assert call["schema_name"] == "vehicle_color"
    assert call["prompt"].startswith("This is a 1994 Toyota Supra. ")
    assert call["prompt"].endswith(COLOR_PROMPT)


def test_identify_color_skips_hint_for_unknown_vehicle() -> None:
    client = FakeVehicleIdentifier()

    asyncio.run(_service(client).identify_color(make_image_data_url(), "", "", ""))

    assert client.calls[0]["prompt"] == COLOR_PROMPT


def test_identify_runs_compression_off_the_event_loop(monkeypatch) -> None:
    threads: list[str] = []
    original = vehicles.compress_data_url

    def recording_compress(image: str, max_size: int, quality: int) -> str:
        threads.append(threading.current_thread().name)
        return original(image, max_size, quality)

    monkeypatch.setattr(vehicles, "compress_data_url", recording_compress)

    async def run() -> str:
        await _service(FakeVehicleIdentifier()).identify(make_image_data_url())
        return threading.current_thread().name

    loop_thread = asyncio.run(run())

    assert threads
    assert loop_thread not in threads
