"""Vehicle identification service using LLMs."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol, TypeVar

from pydantic import BaseModel

from snap_merch.domain.vehicles import (
    PLACEHOLDER_IDENTITY,
    ColorExtract,
    VehicleColor,
    VehicleExtract,
    VehicleIdentity,
)
from snap_merch.services.images import compress_data_url

COLOR_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "hex": {"type": "string"},
    },
    "required": ["name", "hex"],
    "additionalProperties": False,
}

VEHICLE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "year": {"type": "string"},
        "make": {"type": "string"},
        "model": {"type": "string"},
        "trim": {"type": "string"},
        "color": COLOR_SCHEMA,
    },
    "required": ["year", "make", "model", "trim", "color"],
    "additionalProperties": False,
}

IDENTIFY_PROMPT = (
    "Identify the vehicle in this image. Provide the factory Year, Make, Model, "
    "and Trim level. Also identify the primary exterior paint color (descriptive "
    "name and closest hex code)."
)

COLOR_PROMPT = (
    "Identify the exact exterior paint color of this vehicle. If you know the "
    "factory paint code or name for this year/make/model, use it. Return the "
    "color name and its hex code."
)

FALLBACK_WARNING = "Couldn't auto-ID the vehicle. Edit the details, then generate."

# (max side, JPEG quality) for photos sent to the vision model.
IDENTIFY_IMAGE = (1200, 70)
COLOR_IMAGE = (800, 60)

ExtractT = TypeVar("ExtractT", bound=BaseModel)

_logger = logging.getLogger(__name__)


class VehicleIdentifier(Protocol):
    """Vision model that answers a question about a vehicle photo."""

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
        """Return the model answer validated as ``response_model``."""


def color_hint(year: str, make: str, model: str) -> str:
    """Return a "This is a ..." hint when the vehicle is fully known."""
    if year and make and model:
        return f"This is a {year} {make} {model}. "
    return ""


@dataclass
class VehicleService:
    """Service that prepares identification prompts and validates results."""

    client: VehicleIdentifier
    model: str
    reasoning_effort: str | None
    store: bool

    async def identify(self, image_data_url: str) -> VehicleIdentity:
        """Identify the vehicle in a photo via the configured client."""
        extract = await self._describe(
            image_data_url,
            IDENTIFY_IMAGE,
            prompt=IDENTIFY_PROMPT,
            schema_name="vehicle_identity",
            schema=VEHICLE_SCHEMA,
            response_model=VehicleExtract,
        )
        return extract.to_identity()

    async def identify_or_placeholder(
        self, image_data_url: str
    ) -> tuple[VehicleIdentity, str | None]:
        """Identify a vehicle, substituting a placeholder identity on failure."""
        try:
            return await self.identify(image_data_url), None
        except Exception:
            _logger.exception("Vehicle identification failed")
            return PLACEHOLDER_IDENTITY, FALLBACK_WARNING

    async def identify_color(
        self, image_data_url: str, year: str, make: str, model: str
    ) -> VehicleColor:
        """Identify the paint color once the vendor has corrected the vehicle."""
        extract = await self._describe(
            image_data_url,
            COLOR_IMAGE,
            prompt=color_hint(year, make, model) + COLOR_PROMPT,
            schema_name="vehicle_color",
            schema=COLOR_SCHEMA,
            response_model=ColorExtract,
        )
        return extract.to_color()

    async def _describe(  # noqa: PLR0913
        self,
        image_data_url: str,
        image_limits: tuple[int, int],
        *,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        response_model: type[ExtractT],
    ) -> ExtractT:
        max_size, quality = image_limits
        compressed = await asyncio.to_thread(
            compress_data_url, image_data_url, max_size, quality
        )
        return await self.client.describe_photo(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=compressed,
            prompt=prompt,
            schema_name=schema_name,
            schema=schema,
            response_model=response_model,
        )
