"""
Vision provider package.

Provides one interface with swappable implementations:
- ClaudeVisionProvider: live Anthropic Messages API
- MockVisionProvider: canned replies for development and demos

Usage:
    from snapcoach.services.providers import get_vision_provider

    provider = get_vision_provider()
    text = await provider.generate(prompt, VisionImage.from_payload(image_bytes))
"""
from snapcoach.config import settings
from snapcoach.services.providers.base import VisionImage, VisionProvider
from snapcoach.services.providers.claude_provider import ClaudeVisionProvider
from snapcoach.services.providers.mock_provider import MockVisionProvider


def get_vision_provider(name: str | None = None) -> VisionProvider:
    """
    Factory function to get the configured vision provider.

    Args:
        name: Provider name ("claude" or "mock"); defaults to settings.vision_provider

    Raises:
        ValueError: If the provider name is unknown
    """
    name = (name or settings.vision_provider).lower()
    if name == "claude":
        return ClaudeVisionProvider()
    if name == "mock":
        return MockVisionProvider()
    raise ValueError(f"Unknown vision provider: {name}")


__all__ = [
    "ClaudeVisionProvider",
    "MockVisionProvider",
    "VisionImage",
    "VisionProvider",
    "get_vision_provider",
]
