"""Generation backend — Anthropic client wrapper and availability check."""

import logging

import anthropic
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from . import config
from .errors import BackendUnavailableError
from .models import Availability

logger = logging.getLogger("docu.llm")

# Transient failures worth another attempt; anything else fails fast
RETRYABLE_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)


def check_availability(force_mode: str = config.FORCE_MODE, api_key: str = config.ANTHROPIC_API_KEY) -> Availability:
    """Decide whether generation can be attempted at all.

    Pure given its inputs: no network probe. Transient outages surface later
    as BackendUnavailableError from generate().
    """
    mode = (force_mode or "auto").lower()
    if mode == "offline":
        return Availability(False, "Forced offline mode")
    if mode == "online":
        return Availability(True, "Forced online mode")
    if not api_key:
        return Availability(False, "no API key")
    return Availability(True)


class GenerationBackend:
    """Text generation over the Anthropic Messages API.

    The client is injected so tests can pass a MagicMock; in the app it is
    created once and cached with st.cache_resource.
    """

    def __init__(
        self,
        client=None,
        model: str = config.MODEL_NAME,
        max_tokens: int = config.MAX_TOKENS,
        max_retries: int = config.MAX_RETRIES,
        wait=None,
    ):
        self.client = client if client is not None else anthropic.Anthropic(api_key=config.ANTHROPIC_API_KEY or None)
        self.model = model
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.wait = wait if wait is not None else wait_exponential(multiplier=1, min=2, max=60)

    def generate(self, prompt: str, context: dict | None = None) -> str:
        """Generate text for ``prompt``.

        ``context`` may carry ``system`` (system instructions) and ``documents``
        (name -> text) appended to the user message.
        """
        context = context or {}
        content = prompt
        documents = context.get("documents") or {}
        if documents:
            blocks = "\n\n".join(f"## {name}\n{text}" for name, text in documents.items())
            content = f"{prompt}\n\n# Project Documents\n\n{blocks}"

        try:
            for attempt in Retrying(
                wait=self.wait,
                stop=stop_after_attempt(self.max_retries + 1),
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                reraise=True,
            ):
                with attempt:
                    response = self.client.messages.create(
                        model=self.model,
                        max_tokens=self.max_tokens,
                        system=context.get("system", ""),
                        messages=[{"role": "user", "content": content}],
                    )
        except anthropic.APIError as e:
            logger.warning("Generation failed: %s", e)
            raise BackendUnavailableError(type(e).__name__) from e

        logger.debug(
            "API usage - input_tokens: %d, output_tokens: %d, stop_reason: %s",
            response.usage.input_tokens, response.usage.output_tokens, response.stop_reason,
        )
        text = "".join(block.text for block in response.content if block.type == "text").strip()
        if not text:
            raise BackendUnavailableError("empty response")
        return text
