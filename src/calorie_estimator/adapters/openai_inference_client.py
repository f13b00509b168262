"""OpenAI Chat Completions client for structured nutrition output."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from calorie_estimator.domain.images import ImagePayload
from calorie_estimator.services.inference import InferenceClient


@dataclass
class OpenAIInferenceClient(InferenceClient):
    """Inference client backed by OpenAI structured outputs."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAIInferenceClient":
        """Create an OpenAI inference client."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

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
        """Call OpenAI with a strict JSON schema response format."""
        content: list[dict[str, object]] = [{"type": "text", "text": prompt}]
        if image is not None:
            content.append(
                {"type": "image_url", "image_url": {"url": image.to_data_url()}}
            )
        request_payload: dict[str, object] = {
            "model": self.model,
            "messages": [{"role": "user", "content": content}],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                },
            },
            "temperature": temperature,
        }
        if seed is not None:
            request_payload["seed"] = seed

        response = await self.client.chat.completions.create(**request_payload)
        message = response.choices[0].message
        if getattr(message, "refusal", None):
            raise RuntimeError(f"OpenAI refused the request: {message.refusal}")
        return message.content or ""

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
