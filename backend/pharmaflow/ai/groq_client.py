"""
Groq API client for the drug information assistant.

The assistant is advisory text only: it never reads or writes the
database, and callers get None back on any failure so they can show a
fallback message instead.
"""
import logging
from typing import Optional

from groq import Groq, APIError

from pharmaflow.core.config import settings

# Never log the API key
logger = logging.getLogger(__name__)


class GroqClient:
    """
    Thin wrapper around the Groq chat completions API.

    - One attempt per question, no retries
    - Returns the answer text, or None on any error
    """

    TEMPERATURE = 0.2
    MAX_TOKENS = 1024
    TIMEOUT_SECONDS = 15

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        api_key = api_key if api_key is not None else settings.GROQ_API_KEY
        self.model = model or settings.GROQ_MODEL

        if not api_key:
            logger.warning("GROQ_API_KEY not set, drug assistant is disabled")
            self.client = None
        else:
            self.client = Groq(api_key=api_key, timeout=self.TIMEOUT_SECONDS)
            logger.info("Groq client initialized")

    def is_available(self) -> bool:
        return self.client is not None

    def complete(self, prompt: str) -> Optional[str]:
        """Send a single user prompt and return the reply text."""
        if not self.is_available():
            return None

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
                stream=False,
            )
        except APIError as e:
            logger.error(f"Groq API error: {e}")
            return None

        if not response.choices:
            logger.warning("LLM returned empty response")
            return None
        content = response.choices[0].message.content
        return content.strip() if content else None


_groq_client: Optional[GroqClient] = None


def get_groq_client() -> GroqClient:
    """Shared GroqClient instance."""
    global _groq_client
    if _groq_client is None:
        _groq_client = GroqClient()
    return _groq_client
