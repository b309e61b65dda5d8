"""OpenAI Images API client for artwork and mockups."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from snap_merch.services.artwork import ImageClient
from snap_merch.services.images import decode_data_url

IMAGE_SIZE = "1024x1024"

_EXTENSIONS = {"image/png": "png", "image/webp": "webp"}


@dataclass
class OpenAIImageClient(ImageClient):
    """Image client backed by OpenAI image generation and edits."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIImageClient":
        """Create an OpenAI image client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate_image(
        self, *, model: str, prompt: str, reference_image: str | None
    ) -> str:
        """Generate an image, editing from the reference image when given."""
        if reference_image:
            raw, mime_type = decode_data_url(reference_image)
            extension = _EXTENSIONS.get(mime_type, "jpg")
            response = await self.client.images.edit(
                model=model,
                image=(f"reference.{extension}", raw, mime_type),
                prompt=prompt,
                size=IMAGE_SIZE,
            )
        else:
            response = await self.client.images.generate(
                model=model,
                prompt=prompt,
                size=IMAGE_SIZE,
                n=1,
            )
        data = response.data or []
        encoded = data[0].b64_json if data else None
        if not encoded:
            raise RuntimeError("The design studio failed to render the image")
        return f"data:image/png;base64,{encoded}"
