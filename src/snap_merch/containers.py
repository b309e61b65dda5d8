"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from snap_merch.adapters.file_local_store import FileLocalStore
from snap_merch.adapters.openai_image_client import OpenAIImageClient
from snap_merch.adapters.openai_vehicle_client import OpenAIVehicleClient
from snap_merch.adapters.supabase_event_repository import (
    SupabaseEventMirrorRepository,
)
from snap_merch.adapters.usage_tracker_client import HttpxUsageTrackerClient
from snap_merch.config import Settings
from snap_merch.services.artwork import ArtworkService
from snap_merch.services.event_store import EventStore
from snap_merch.services.generation import GenerationOrchestrator
from snap_merch.services.mirror import EventMirror, RemoteSyncQueue
from snap_merch.services.studio import StudioService
from snap_merch.services.usage import UsageTracker
from snap_merch.services.vehicles import VehicleService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    sync_queue: RemoteSyncQueue
    event_store: EventStore
    studio_service: StudioService
    usage_tracker: UsageTracker
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    sync_queue = RemoteSyncQueue(
        max_size=resolved_settings.sync_queue_size,
        retry_attempts=resolved_settings.sync_retry_attempts,
        retry_delay_seconds=resolved_settings.sync_retry_delay_seconds,
    )
    event_store = EventStore(
        local_store=FileLocalStore(
            Path(resolved_settings.local_store_path),
            capacity_bytes=resolved_settings.local_store_capacity_bytes,
        ),
        mirror=EventMirror(SupabaseEventMirrorRepository(supabase_client), sync_queue),
    )
    tracker_client = (
        HttpxUsageTrackerClient.create(resolved_settings.tracker_url)
        if resolved_settings.tracker_url
        else None
    )
    usage_tracker = UsageTracker(tracker_client)
    vehicle_service = VehicleService(
        client=OpenAIVehicleClient.create(resolved_settings.openai_api_key),
        model=resolved_settings.openai_vision_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    artwork_service = ArtworkService(
        client=OpenAIImageClient.create(resolved_settings.openai_api_key),
        model=resolved_settings.openai_image_model,
        usage_tracker=usage_tracker,
    )
    studio_service = StudioService(
        event_store=event_store,
        vehicle_service=vehicle_service,
        orchestrator=GenerationOrchestrator(
            artwork_service,
            concurrency=resolved_settings.generation_concurrency,
            stagger_seconds=resolved_settings.generation_stagger_seconds,
        ),
        artwork_service=artwork_service,
        initial_batch_size=resolved_settings.initial_batch_size,
        more_batch_size=resolved_settings.more_batch_size,
    )

    async def close_resources() -> None:
        await sync_queue.drain()
        await sync_queue.close()
        await usage_tracker.flush()
        if tracker_client is not None:
            await tracker_client.close()

    return AppContainer(
        settings=resolved_settings,
        sync_queue=sync_queue,
        event_store=event_store,
        studio_service=studio_service,
        usage_tracker=usage_tracker,
        close_resources=close_resources,
    )
