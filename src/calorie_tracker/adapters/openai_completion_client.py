"""OpenAI chat completions client for JSON-mode prompts."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from calorie_tracker.domain.ai import CompletionResult, TokenUsage
from calorie_tracker.services.meal_parsing import CompletionClient


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by the OpenAI chat completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float) -> "OpenAICompletionClient":
        """Create a client whose requests fail after ``timeout_seconds``."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        )

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> CompletionResult:
        """Request a JSON object completion."""
        response = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
        )
        text = response.choices[0].message.content if response.choices else None
        usage = response.usage
        return CompletionResult(
            text=text,
            usage=TokenUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
