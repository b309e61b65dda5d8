"""Shared test fixtures."""

import base64
from dataclasses import dataclass, field
from datetime import UTC, datetime
from io import BytesIO

import pytest
from PIL import Image

from snap_merch.config import Settings
from snap_merch.containers import AppContainer
from snap_merch.domain.sessions import CarSession, EventSession, GeneratedStyle, Order
from snap_merch.domain.styles import StyleConfig
from snap_merch.domain.vehicles import VehicleIdentity
from snap_merch.services.artwork import ArtworkService, ImageClient
from snap_merch.services.event_store import EventStore
from snap_merch.services.generation import GenerationOrchestrator, StyleImageGenerator
from snap_merch.services.local_store import InMemoryLocalStore
from snap_merch.services.mirror import (
    EventMirror,
    EventMirrorRepository,
    RemoteSyncQueue,
)
from snap_merch.services.studio import StudioService
from snap_merch.services.usage import UsageTracker, UsageTrackerClient
from snap_merch.services.vehicles import ExtractT, VehicleIdentifier, VehicleService

SUPRA = {
    "year": "1994",
    "make": "Toyota",
    "model": "Supra",
    "trim": "Turbo",
    "color": {"name": "Renaissance Red", "hex": "#B3001B"},
}

SUPRA_PAINT = {"name": "Super Red IV", "hex": "#C8102E"}


def make_image_data_url(
    width: int = 64, height: int = 48, color: str = "red", fmt: str = "PNG"
) -> str:
    """Build a real encoded image as a data URL."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    mime = "image/png" if fmt == "PNG" else "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(buffer.getvalue()).decode()}"


class FixedClock:
    """Settable clock for date rollover tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 6, 14, 9, 30, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


async def no_sleep(_seconds: float) -> None:
    return None


@dataclass
class FakeVehicleIdentifier(VehicleIdentifier):
    """Fake vision client returning fixed payloads per question."""

    result: dict[str, object] = field(default_factory=lambda: dict(SUPRA))
    color_result: dict[str, object] = field(default_factory=lambda: dict(SUPRA_PAINT))
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def describe_photo(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        response_model: type[ExtractT],
    ) -> ExtractT:
        self.calls.append(
            {
                "model": model,
                "image_data_url": image_data_url,
                "prompt": prompt,
                "schema_name": schema_name,
            }
        )
        if self.error is not None:
            raise self.error
        payload = self.color_result if schema_name == "vehicle_color" else self.result
        return response_model.model_validate(payload)


@dataclass
class FakeImageClient(ImageClient):
    """Fake image model that echoes a tiny PNG per call."""

    fail_when: str | None = None
    prompts: list[str] = field(default_factory=list)
    references: list[str | None] = field(default_factory=list)

    async def generate_image(
        self, *, model: str, prompt: str, reference_image: str | None
    ) -> str:
        self.prompts.append(prompt)
        self.references.append(reference_image)
        if self.fail_when and self.fail_when in prompt:
            raise RuntimeError("The design studio failed to render the image")
        return make_image_data_url(32, 32, "blue")


@dataclass
class FakeStyleGenerator(StyleImageGenerator):
    """Generator that fails for chosen style ids and records call order."""

    failing: set[str] = field(default_factory=set)
    calls: list[tuple[str, str | None]] = field(default_factory=list)

    async def generate_style_image(
        self,
        identity: VehicleIdentity,
        style: StyleConfig,
        reference_image: str | None = None,
    ) -> str:
        self.calls.append((style.id, reference_image))
        if style.id in self.failing:
            raise RuntimeError(f"{style.id} exploded")
        return f"https://cdn.example.com/{style.id}.png"


@dataclass
class InMemoryMirrorRepository(EventMirrorRepository):
    """Mirror repository storing rows by id, like an upsert would."""

    events: dict[str, tuple[EventSession, str]] = field(default_factory=dict)
    cars: dict[str, tuple[CarSession, str]] = field(default_factory=dict)
    styles: dict[str, GeneratedStyle] = field(default_factory=dict)
    orders: dict[str, Order] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    failures_left: int = 0
    stored_event: EventSession | None = None
    load_error: Exception | None = None

    def _maybe_fail(self) -> None:
        if self.failures_left > 0:
            self.failures_left -= 1
            raise ConnectionError("supabase unavailable")

    def upsert_event(self, session: EventSession, user_id: str) -> None:
        self._maybe_fail()
        self.calls.append(f"event:{session.id}")
        self.events[session.id] = (session, user_id)

    def upsert_car(self, car: CarSession, event_id: str) -> None:
        self.calls.append(f"car:{car.id}")
        self.cars[car.id] = (car, event_id)

    def upsert_style(self, car_id: str, style: GeneratedStyle) -> None:
        self.calls.append(f"style:{car_id}_{style.style_id}")
        self.styles[f"{car_id}_{style.style_id}"] = style

    def upsert_order(self, order: Order) -> None:
        self._maybe_fail()
        self.calls.append(f"order:{order.id}")
        self.orders[order.id] = order

    def load_event(self, user_id: str, day: str) -> EventSession | None:
        if self.load_error is not None:
            raise self.load_error
        return self.stored_event


@dataclass
class FakeUsageTrackerClient(UsageTrackerClient):
    payloads: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    async def post_usage(self, payload: dict[str, object]) -> None:
        if self.error is not None:
            raise self.error
        self.payloads.append(payload)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
        local_store_path=str(tmp_path / "store"),
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def mirror_repository() -> InMemoryMirrorRepository:
    return InMemoryMirrorRepository()


@pytest.fixture
def sync_queue() -> RemoteSyncQueue:
    return RemoteSyncQueue(retry_attempts=1, retry_delay_seconds=0)


@pytest.fixture
def event_store(
    clock: FixedClock,
    mirror_repository: InMemoryMirrorRepository,
    sync_queue: RemoteSyncQueue,
) -> EventStore:
    return EventStore(
        local_store=InMemoryLocalStore(),
        mirror=EventMirror(mirror_repository, sync_queue),
        clock=clock,
    )


@pytest.fixture
def vehicle_identifier() -> FakeVehicleIdentifier:
    return FakeVehicleIdentifier()


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def studio_service(
    settings: Settings,
    event_store: EventStore,
    vehicle_identifier: FakeVehicleIdentifier,
    image_client: FakeImageClient,
    clock: FixedClock,
) -> StudioService:
    artwork_service = ArtworkService(
        client=image_client, model=settings.openai_image_model
    )
    return StudioService(
        event_store=event_store,
        vehicle_service=VehicleService(
            client=vehicle_identifier,
            model=settings.openai_vision_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        orchestrator=GenerationOrchestrator(artwork_service, sleep=no_sleep),
        artwork_service=artwork_service,
        clock=clock,
    )


@pytest.fixture
def container(
    settings: Settings,
    event_store: EventStore,
    studio_service: StudioService,
    sync_queue: RemoteSyncQueue,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        sync_queue=sync_queue,
        event_store=event_store,
        studio_service=studio_service,
        usage_tracker=UsageTracker(None),
        close_resources=close_resources,
    )
