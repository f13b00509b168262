"""Google Gemini client for structured nutrition output."""

from dataclasses import dataclass

from google import genai
from google.genai import types

from calorie_estimator.domain.images import ImagePayload
from calorie_estimator.services.inference import InferenceClient


@dataclass
class GeminiInferenceClient(InferenceClient):
    """Inference client backed by the Gemini generate_content API."""

    client: genai.Client
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "GeminiInferenceClient":
        """Create a Gemini inference client using API key auth."""
        return cls(client=genai.Client(api_key=api_key), model=model)

    async def generate(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        image: ImagePayload | None,
        temperature: float,
        seed: int | None,
    ) -> str:
        """Call Gemini with a JSON response schema."""
        contents: list[object] = []
        if image is not None:
            contents.append(
                types.Part.from_bytes(data=image.data, mime_type=image.mime_type)
            )
        contents.append(prompt)
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_json_schema=schema,
            temperature=temperature,
            seed=seed,
        )
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )
        return response.text or ""

    async def close(self) -> None:
        """Close the async HTTP session."""
        await self.client.aio.aclose()
