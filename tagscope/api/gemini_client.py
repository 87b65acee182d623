"""Gemini client that asks for tagging recommendations.

Sends the serialized element inventory together with a fixed instruction
template and returns the model's raw reply text. Parsing the reply is the
job of ``tagscope.core.recovery``.
"""
import json
from typing import Any, Optional

from google import genai
from google.genai import types
from loguru import logger

RECOMMENDATION_PROMPT = """\
You are given a JSON object describing the interactive elements found on a webpage.
Identify the elements that are worth tagging for analytics tracking.

Output requirements:
- Return a JSON array with one object per element worth tagging.
- Each object has exactly these keys:
  - "element": a short label with a capitalized first letter describing the element
    and its action, e.g. "Button - Log In", "Link - Sign Up", "Form - Contact Us".
  - "reason": a descriptive explanation of how tracking this element helps the
    site's analytics, e.g. "Measures engagement with the primary call-to-action".
  - "selector_code": the CSS selector for the element, taken from its "selector" field.
- Focus on user-interactive elements: buttons, links, form fields and other clickable areas.
- Skip non-interactive elements unless they carry metadata that matters for tracking.
- Rank the array by importance, most significant element first.
- Give every entry a distinct purpose.

Example:
[
  {{"element": "Button - Log In", "reason": "Tracks key user engagement on login", "selector_code": "#login"}},
  {{"element": "Form - Contact Us", "reason": "Captures lead submissions for follow-up", "selector_code": "form.contact"}}
]

Input:
{inventory}
"""


class GenerationError(Exception):
    """Raised when the model cannot produce a reply."""


def serialize_input(payload: Any) -> str:
    """Strings pass through untouched; anything else is dumped as JSON."""
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, ensure_ascii=False)


def build_prompt(payload: Any) -> str:
    return RECOMMENDATION_PROMPT.format(inventory=serialize_input(payload))


class GeminiClient:
    """Thin async wrapper around ``google.genai`` text generation."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        flash_model: str = "gemini-2.0-flash",
        max_output_tokens: int = 1000,
        temperature: float = 1.0,
        client: Optional[genai.Client] = None,
    ):
        """Initialize the Gemini client.

        Args:
            api_key: Google API key
            model: Default model name
            flash_model: Model used when ``use_flash`` is requested
            max_output_tokens: Upper bound on reply length
            temperature: Sampling temperature
            client: Pre-built ``genai.Client`` (used by tests)
        """
        self.api_key = api_key
        self.model = model
        self.flash_model = flash_model
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise GenerationError("GOOGLE_API_KEY is not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def select_model(self, use_flash: bool = False) -> str:
        return self.flash_model if use_flash else self.model

    async def generate_text(self, prompt: str, use_flash: bool = False) -> str:
        """Send a prompt and return the reply text.

        Args:
            prompt: Complete prompt text
            use_flash: Use the flash model instead of the default

        Returns:
            Raw reply text

        Raises:
            GenerationError: If the key is missing, the call fails, or
                the reply is empty
        """
        client = self._get_client()
        model = self.select_model(use_flash)
        logger.debug(f"Sending {len(prompt)} char prompt to {model}")

        try:
            response = await client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    max_output_tokens=self.max_output_tokens,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            logger.error(f"Gemini generate_content failed: {e}")
            raise GenerationError(f"Error generating content: {e}") from e

        text = response.text
        if not text:
            raise GenerationError(f"{model} returned an empty reply")

        logger.info(f"Received {len(text)} chars from {model}")
        return text

    async def recommend(self, inventory: Any, use_flash: bool = False) -> str:
        """Ask for tagging recommendations for an element inventory."""
        return await self.generate_text(build_prompt(inventory), use_flash=use_flash)

    async def close(self):
        """Close the SDK's async transport, if one was opened."""
        if self._client is None:
            return
        # Older google-genai releases have no async close
        aclose = getattr(self._client.aio, "aclose", None)
        if aclose is not None:
            await aclose()
        self._client = None
