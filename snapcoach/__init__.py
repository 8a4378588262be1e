"""SnapCoach: photo-based meal identification, nutrition estimates and weekly coaching."""

__version__ = "0.1.0"
