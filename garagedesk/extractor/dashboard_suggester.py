# extractor/dashboard_suggester.py

from typing import Sequence

from openai import OpenAI


class DashboardSuggester:
    """
    Uses OpenAI to get free-text dashboard advice for a conversation.
    """

    def __init__(
        self,
        client: OpenAI,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def suggest(self, system_prompt: str, context: Sequence[str]) -> str:
        """
        Sends the system prompt followed by every context entry (as user
        messages, oldest first) and returns the completion text.
        """
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": "user", "content": msg} for msg in context)

        completion = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        return completion.choices[0].message.content or ""
