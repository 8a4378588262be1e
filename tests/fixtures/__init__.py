"""Test fixtures for SnapCoach."""

from tests.fixtures.mocks import (
    SAMPLE_ANALYSIS,
    SAMPLE_IDENTIFICATION,
    FakeVisionProvider,
    make_analysis,
    make_jpeg,
)

__all__ = [
    "SAMPLE_ANALYSIS",
    "SAMPLE_IDENTIFICATION",
    "FakeVisionProvider",
    "make_analysis",
    "make_jpeg",
]
