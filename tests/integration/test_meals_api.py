"""Integration tests for one-shot meal analysis."""
import pytest

from snapcoach.services.errors import (
    MalformedResponse,
    ProviderError,
    RateLimitError,
    ServiceUnavailableError,
)
from snapcoach.services.vision_service import DEFAULT_DIRECT_CONTEXT
from tests.fixtures.mocks import SAMPLE_ANALYSIS

pytestmark = pytest.mark.integration


def post_image(client, image: bytes):
    return client.post(
        "/meals/analyze-direct", files={"image": ("meal.jpg", image, "image/jpeg")}
    )


class TestAnalyzeDirect:

    def test_success(self, client, fake_provider, sample_jpeg):
        response = post_image(client, sample_jpeg)

        assert response.status_code == 200
        assert response.json() == SAMPLE_ANALYSIS
        assert len(fake_provider.calls) == 1
        assert DEFAULT_DIRECT_CONTEXT in fake_provider.prompts[0]

    def test_invalid_image(self, client, fake_provider):
        response = post_image(client, b"\x00\x01\x02")

        assert response.status_code == 400
        assert fake_provider.calls == []

    def test_missing_image(self, client):
        assert client.post("/meals/analyze-direct").status_code == 422

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (RateLimitError("Too many requests"), 429),
            (ServiceUnavailableError("AI service temporarily unavailable"), 503),
            (ProviderError("Request error: bad request"), 503),
            (MalformedResponse("bad json", raw_text="oops"), 502),
        ],
    )
    def test_error_mapping(self, client, fake_provider, sample_jpeg, error, status_code):
        fake_provider.set_error(error)

        response = post_image(client, sample_jpeg)

        assert response.status_code == status_code
        assert response.json()["detail"]
