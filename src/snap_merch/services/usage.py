"""Fire-and-forget model usage tracking."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

IMAGE_COST_PER_IMAGE = 0.04

IMAGE_MODEL_PRICING: dict[str, float] = {
    "gpt-image-1": 0.042,
    "gpt-image-1-mini": 0.011,
    "dall-e-3": 0.04,
}

_logger = logging.getLogger(__name__)


class UsageTrackerClient(Protocol):
    """Interface for posting usage records to a tracker endpoint."""

    async def post_usage(self, payload: dict[str, object]) -> None:
        """Send one usage record."""


def estimate_image_cost(image_count: int, model: str) -> float:
    """Estimate USD cost for generated images."""
    per_image = IMAGE_MODEL_PRICING.get(model, IMAGE_COST_PER_IMAGE)
    return round(image_count * per_image, 4)


@dataclass
class UsageTracker:
    """Records generation calls without ever blocking or failing the caller."""

    client: UsageTrackerClient | None
    app: str = "SnapMerch"
    _pending: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    def track_image_call(
        self,
        operation: str,
        model: str,
        image_count: int,
        duration_ms: int,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Schedule a usage record in the background."""
        if self.client is None:
            return
        payload: dict[str, object] = {
            "app": self.app,
            "model": model,
            "operation": operation,
            "imageCount": image_count,
            "estimatedCost": estimate_image_cost(image_count, model),
            "durationMs": duration_ms,
            "metadata": metadata or {},
        }
        task = asyncio.create_task(self._send(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait for all scheduled usage records to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    async def _send(self, payload: dict[str, object]) -> None:
        try:
            await self.client.post_usage(payload)
        except Exception as exc:
            _logger.debug("Usage tracking failed for %s: %s", payload["operation"], exc)
