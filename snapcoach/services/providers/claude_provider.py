"""Live vision provider backed by the Anthropic Messages API."""

import logging

import anthropic
import httpx
from anthropic import Anthropic

from snapcoach.config import settings
from snapcoach.services.errors import (
    ProviderError,
    RateLimitError,
    ServiceUnavailableError,
)
from snapcoach.services.providers.base import VisionImage, VisionProvider

logger = logging.getLogger(__name__)


class ClaudeVisionProvider(VisionProvider):
    """Claude vision model, one request per generate() call."""

    name = "claude"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        client: Anthropic | None = None,
    ):
        if client is None:
            timeout = httpx.Timeout(
                timeout=settings.anthropic_timeout,
                connect=settings.anthropic_connect_timeout,
            )
            client = Anthropic(
                api_key=api_key if api_key is not None else settings.anthropic_api_key,
                timeout=timeout,
                max_retries=0,  # retries are the caller's decision
            )
        self.client = client
        self.model = model or settings.vision_model
        self.max_tokens = max_tokens or settings.vision_max_tokens

    async def generate(self, prompt: str, image: VisionImage) -> str:
        """
        Send one image + prompt message to Claude.

        Returns:
            Concatenated text blocks of the reply

        Raises:
            ServiceUnavailableError: Connection error, timeout, 5xx, or empty reply
            RateLimitError: Too many requests
            ProviderError: Other request errors (4xx)
        """
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": image.media_type,
                                    "data": image.data,
                                },
                            },
                            {"type": "text", "text": prompt},
                        ],
                    }
                ],
            )
        except anthropic.APIConnectionError as e:
            logger.error("Vision request failed to connect: %s", e)
            raise ServiceUnavailableError("AI service temporarily unavailable") from e
        except anthropic.RateLimitError as e:
            logger.error("Vision request rate limited: %s", e)
            raise RateLimitError(
                "Too many requests, please try again in 1 minute"
            ) from e
        except anthropic.APIStatusError as e:
            logger.error("Vision request failed with status %s: %s", e.status_code, e)
            if e.status_code >= 500:
                raise ServiceUnavailableError("AI service error") from e
            raise ProviderError(f"Request error: {e.message}") from e

        response_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                response_text += block.text

        if not response_text.strip():
            logger.error("Vision model %s returned no text", self.model)
            raise ServiceUnavailableError("Empty response from AI service")

        return response_text
