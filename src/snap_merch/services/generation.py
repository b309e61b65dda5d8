"""Batched, bounded-concurrency style image generation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from snap_merch.domain.styles import StyleConfig
from snap_merch.domain.vehicles import VehicleIdentity

DEFAULT_CONCURRENCY = 2
DEFAULT_STAGGER_SECONDS = 0.5

StyleCompleteCallback = Callable[[str, str], None]
StyleErrorCallback = Callable[[str, str], None]

_logger = logging.getLogger(__name__)


class StyleImageGenerator(Protocol):
    """Remote style rendering, one call per style."""

    async def generate_style_image(
        self,
        identity: VehicleIdentity,
        style: StyleConfig,
        reference_image: str | None = None,
    ) -> str:
        """Return an image reference for the rendered style."""


@dataclass
class GenerationOrchestrator:
    """Runs style requests in sequential windows of concurrent calls.

    Each window holds up to ``concurrency`` requests. The first request of a
    window is dispatched immediately and every later one waits
    ``stagger_seconds`` first. A window finishes only when all of its requests
    have settled; a failure never cancels its siblings and nothing is retried.
    Callbacks fire as soon as each individual request settles.
    """

    generator: StyleImageGenerator
    concurrency: int = DEFAULT_CONCURRENCY
    stagger_seconds: float = DEFAULT_STAGGER_SECONDS
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")

    async def generate_batch(
        self,
        identity: VehicleIdentity,
        styles: Sequence[StyleConfig],
        reference_image: str | None = None,
        on_complete: StyleCompleteCallback | None = None,
        on_error: StyleErrorCallback | None = None,
    ) -> dict[str, str]:
        """Generate every requested style and return images keyed by style id."""
        results: dict[str, str] = {}
        for start in range(0, len(styles), self.concurrency):
            window = styles[start : start + self.concurrency]
            outcomes = await asyncio.gather(
                *(
                    self._generate_one(
                        identity,
                        style,
                        index,
                        reference_image,
                        results,
                        on_complete,
                        on_error,
                    )
                    for index, style in enumerate(window)
                ),
                return_exceptions=True,
            )
            for style, outcome in zip(window, outcomes, strict=True):
                if isinstance(outcome, Exception):
                    _logger.error(
                        "Style callback for %s raised: %s",
                        style.id,
                        outcome,
                        exc_info=outcome,
                    )
        return results

    async def _generate_one(  # noqa: PLR0913
        self,
        identity: VehicleIdentity,
        style: StyleConfig,
        index: int,
        reference_image: str | None,
        results: dict[str, str],
        on_complete: StyleCompleteCallback | None,
        on_error: StyleErrorCallback | None,
    ) -> None:
        if index > 0:
            await self.sleep(self.stagger_seconds)
        try:
            image = await self.generator.generate_style_image(
                identity, style, reference_image
            )
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            _logger.warning("Style %s failed: %s", style.id, message)
            if on_error is not None:
                on_error(style.id, message)
            return
        results[style.id] = image
        if on_complete is not None:
            on_complete(style.id, image)
