"""OpenAI Responses API client for questions about vehicle photos."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from snap_merch.services.vehicles import ExtractT, VehicleIdentifier


@dataclass
class OpenAIVehicleClient(VehicleIdentifier):
    """Sends a photo plus prompt and parses the strict JSON answer."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIVehicleClient":
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Ask the vision model and validate its answer with ``response_model``.

        Raises RuntimeError on an empty answer and pydantic.ValidationError when
        the answer does not match the model.
        """
        content = [
            {"type": "input_text", "text": prompt},
            {"type": "input_image", "image_url": image_data_url},
        ]
        options: dict[str, object] = {"store": store}
        if reasoning_effort:
            options["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(
            model=model,
            input=[{"role": "user", "content": content}],
            text={
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            **options,
        )
        if not response.output_text:
            raise RuntimeError(f"Vision model returned no {schema_name} answer")
        return response_model.model_validate_json(response.output_text)
