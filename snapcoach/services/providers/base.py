"""Abstract base class for vision-language providers."""
import base64
import binascii
from abc import ABC, abstractmethod
from dataclasses import dataclass

from snapcoach.services.errors import InputError

DEFAULT_MEDIA_TYPE = "image/jpeg"

# Magic-byte prefixes for the formats the providers accept
_SIGNATURES = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


@dataclass(frozen=True)
class VisionImage:
    """Inline image payload: base64 data (no data-URI prefix) and its MIME type."""

    data: str
    media_type: str = DEFAULT_MEDIA_TYPE

    @classmethod
    def from_payload(cls, payload: bytes | str | None) -> "VisionImage":
        """
        Normalize an image payload for transmission.

        Accepts raw bytes, a base64 string, or a data URI
        ("data:image/png;base64,...."). Any data-URI prefix is stripped and its
        MIME type kept.

        Raises:
            InputError: If no image was supplied or it is not valid base64
        """
        if not payload:
            raise InputError("No image provided")

        if isinstance(payload, (bytes, bytearray)):
            return cls(
                data=base64.standard_b64encode(payload).decode("utf-8"),
                media_type=sniff_media_type(bytes(payload)),
            )

        text = payload.strip()
        media_type = None
        if text.startswith("data:"):
            header, _, text = text.partition(",")
            media_type = header[len("data:"):].split(";")[0] or None

        if not text:
            raise InputError("No image provided")

        try:
            raw = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InputError("Image payload is not valid base64") from e

        return cls(data=text, media_type=media_type or sniff_media_type(raw))


def sniff_media_type(data: bytes) -> str:
    """Determine media type from magic bytes."""
    for signature, media_type in _SIGNATURES:
        if data.startswith(signature):
            return media_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return DEFAULT_MEDIA_TYPE


class VisionProvider(ABC):
    """
    A hosted vision-language model.

    One opaque capability: given a prompt and an inline image, return the
    model's free-form text. Implementations raise ProviderError subclasses on
    transport or provider failure and never retry internally.
    """

    name: str = "base"

    @abstractmethod
    async def generate(self, prompt: str, image: VisionImage) -> str:
        """
        Send prompt + image to the model and return its text reply.

        Raises:
            ServiceUnavailableError: Connection/timeout/5xx or empty reply
            RateLimitError: Quota or rate limit exceeded
            ProviderError: Any other provider-side rejection
        """
        pass
