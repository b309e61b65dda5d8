"""Tests for HTTP-based adapters."""

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest
from pydantic import ValidationError

from snap_merch.adapters.openai_image_client import OpenAIImageClient
from snap_merch.adapters.openai_vehicle_client import OpenAIVehicleClient
from snap_merch.adapters.usage_tracker_client import HttpxUsageTrackerClient
from snap_merch.domain.vehicles import ColorExtract, VehicleExtract
from snap_merch.services.vehicles import COLOR_SCHEMA, IDENTIFY_PROMPT, VEHICLE_SCHEMA
from tests.conftest import SUPRA


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return SimpleNamespace(output_text=self.output_text)


class _FakeImages:
    def __init__(self, b64_json: str | None = "aW1n") -> None:
        self.b64_json = b64_json
        self.calls: list[tuple[str, dict[str, object]]] = []

    async def generate(self, **kwargs):  # type: ignore[no-untyped-def]
        self.calls.append(("generate", kwargs))
        return SimpleNamespace(data=[SimpleNamespace(b64_json=self.b64_json)])

    async def edit(self, **kwargs):  # type: ignore[no-untyped-def]
        self.calls.append(("edit", kwargs))
        return SimpleNamespace(data=[SimpleNamespace(b64_json=self.b64_json)])


class _FakeOpenAI:
    def __init__(
        self, output_text: str = json.dumps(SUPRA), b64_json: str | None = "aW1n"
    ) -> None:
        self.responses = _FakeResponses(output_text)
        self.images = _FakeImages(b64_json)


def _describe(client: OpenAIVehicleClient, **overrides):  # type: ignore[no-untyped-def]
    arguments = {
        "model": "gpt-5.2",
        "reasoning_effort": "low",
        "store": False,
        "image_data_url": "data:image/jpeg;base64,ZmFrZQ==",
        "prompt": IDENTIFY_PROMPT,
        "schema_name": "vehicle_identity",
        "schema": VEHICLE_SCHEMA,
        "response_model": VehicleExtract,
        **overrides,
    }
    return asyncio.run(client.describe_photo(**arguments))


def test_openai_vehicle_client_validates_vehicle_answer() -> None:
    fake = _FakeOpenAI()
    client = OpenAIVehicleClient(client=fake)

    extract = _describe(client)

    assert isinstance(extract, VehicleExtract)
    assert extract.to_identity().display_name == "1994 Toyota Supra"
    payload = fake.responses.last_payload
    assert payload["reasoning"] == {"effort": "low"}
    assert payload["text"]["format"]["name"] == "vehicle_identity"
    assert payload["text"]["format"]["schema"] == VEHICLE_SCHEMA


def test_openai_vehicle_client_validates_color_answer() -> None:
    fake = _FakeOpenAI(output_text=json.dumps({"name": "Super Red", "hex": "#C8102E"}))
    client = OpenAIVehicleClient(client=fake)

    extract = _describe(
        client,
        reasoning_effort=None,
        schema_name="vehicle_color",
        schema=COLOR_SCHEMA,
        response_model=ColorExtract,
    )

    assert extract.to_color().hex == "#C8102E"
    assert "reasoning" not in fake.responses.last_payload
    assert fake.responses.last_payload["text"]["format"]["name"] == "vehicle_color"


def test_openai_vehicle_client_rejects_off_schema_answer() -> None:
    client = OpenAIVehicleClient(
        client=_FakeOpenAI(output_text=json.dumps({"year": "1994"}))
    )

    with pytest.raises(ValidationError):
        _describe(client)


def test_openai_vehicle_client_rejects_empty_output() -> None:
    client = OpenAIVehicleClient(client=_FakeOpenAI(output_text=""))

    with pytest.raises(RuntimeError):
        _describe(client, reasoning_effort=None)


def test_openai_image_client_generates_without_reference() -> None:
    fake = _FakeOpenAI()
    client = OpenAIImageClient(client=fake)

    image = asyncio.run(
        client.generate_image(model="gpt-image-1", prompt="neon", reference_image=None)
    )

    assert image == "data:image/png;base64,aW1n"
    assert fake.images.calls[0][0] == "generate"


def test_openai_image_client_edits_with_reference() -> None:
    fake = _FakeOpenAI()
    client = OpenAIImageClient(client=fake)

    asyncio.run(
        client.generate_image(
            model="gpt-image-1",
            prompt="neon",
            reference_image="data:image/png;base64,ZmFrZQ==",
        )
    )

    action, kwargs = fake.images.calls[0]
    assert action == "edit"
    assert kwargs["image"] == ("reference.png", b"fake", "image/png")


def test_openai_image_client_raises_without_image() -> None:
    client = OpenAIImageClient(client=_FakeOpenAI(b64_json=None))

    with pytest.raises(RuntimeError, match="failed to render"):
        asyncio.run(
            client.generate_image(
                model="gpt-image-1", prompt="neon", reference_image=None
            )
        )


def test_usage_tracker_client_posts_json() -> None:
    received: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(204)

    transport = httpx.MockTransport(handler)
    client = HttpxUsageTrackerClient(
        url="https://tracker.example.com/usage",
        http_client=httpx.AsyncClient(transport=transport),
    )

    asyncio.run(client.post_usage({"operation": "generate_design"}))
    asyncio.run(client.close())

    assert received == [{"operation": "generate_design"}]


def test_usage_tracker_client_raises_on_error_status() -> None:
    transport = httpx.MockTransport(lambda _request: httpx.Response(500))
    client = HttpxUsageTrackerClient(
        url="https://tracker.example.com/usage",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.post_usage({"operation": "generate_design"}))
