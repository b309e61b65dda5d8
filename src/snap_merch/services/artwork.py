"""Artwork and mockup rendering through an image model."""

import asyncio
import time
from dataclasses import dataclass
from typing import Protocol

from snap_merch.domain.products import ProductOption
from snap_merch.domain.styles import StyleConfig
from snap_merch.domain.vehicles import VehicleIdentity
from snap_merch.services.images import compress_data_url
from snap_merch.services.style_prompts import (
    build_mockup_prompt,
    build_style_prompt,
    build_tweak_prompt,
)
from snap_merch.services.usage import UsageTracker

# Reference photos are sent small, returned designs are kept small.
REFERENCE_MAX_SIZE = 600
REFERENCE_QUALITY = 50
DESIGN_MAX_SIZE = 600
DESIGN_QUALITY = 70


class ImageClient(Protocol):
    """Interface for image generation models."""

    async def generate_image(
        self, *, model: str, prompt: str, reference_image: str | None
    ) -> str:
        """Render an image and return it as a data URL."""


async def _compress(image: str, max_size: int, quality: int) -> str:
    # Pillow work is CPU bound; keep it off the event loop.
    return await asyncio.to_thread(compress_data_url, image, max_size, quality)


@dataclass
class ArtworkService:
    """Builds prompts, calls the image model and compresses the results."""

    client: ImageClient
    model: str
    usage_tracker: UsageTracker | None = None

    async def generate_style_image(
        self,
        identity: VehicleIdentity,
        style: StyleConfig,
        reference_image: str | None = None,
    ) -> str:
        """Render one catalog style for a vehicle."""
        prompt = build_style_prompt(
            identity, style, has_reference=reference_image is not None
        )
        reference = (
            await _compress(reference_image, REFERENCE_MAX_SIZE, REFERENCE_QUALITY)
            if reference_image
            else None
        )
        started = time.monotonic()
        image = await self.client.generate_image(
            model=self.model, prompt=prompt, reference_image=reference
        )
        self._track(
            "generate_design",
            started,
            {"style": style.art_style, "car": identity.display_name},
        )
        return await _compress(image, DESIGN_MAX_SIZE, DESIGN_QUALITY)

    async def tweak_design(
        self,
        design_image: str,
        instruction: str,
        identity: VehicleIdentity,
        style: StyleConfig,
    ) -> str:
        """Edit an existing design following a free-text vendor instruction."""
        prompt = build_tweak_prompt(instruction, style, identity)
        design = await _compress(design_image, DESIGN_MAX_SIZE, DESIGN_QUALITY)
        started = time.monotonic()
        image = await self.client.generate_image(
            model=self.model, prompt=prompt, reference_image=design
        )
        self._track("tweak_design", started, {"style": style.art_style})
        return await _compress(image, DESIGN_MAX_SIZE, DESIGN_QUALITY)

    async def render_mockup(
        self,
        design_image: str,
        product: ProductOption,
        color_name: str,
        color_hex: str,
        car_description: str,
    ) -> str:
        """Render a product mockup carrying a generated design."""
        prompt = build_mockup_prompt(product, color_name, color_hex, car_description)
        design = await _compress(design_image, DESIGN_MAX_SIZE, DESIGN_QUALITY)
        started = time.monotonic()
        image = await self.client.generate_image(
            model=self.model, prompt=prompt, reference_image=design
        )
        self._track("generate_mockup", started, {"product": product.id})
        return await _compress(image, DESIGN_MAX_SIZE, DESIGN_QUALITY)

    def _track(self, operation: str, started: float, metadata: dict[str, str]) -> None:
        if self.usage_tracker is None:
            return
        self.usage_tracker.track_image_call(
            operation,
            self.model,
            image_count=1,
            duration_ms=int((time.monotonic() - started) * 1000),
            metadata=metadata,
        )
