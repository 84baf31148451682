"""Bouncer - commit-time rules gate backed by a Gemini model."""

__version__ = "0.3.0"
