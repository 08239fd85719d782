"""Data models for ci-affects."""

from .result import DetectionResult, EntrypointResult, Outcome

__all__ = ["DetectionResult", "EntrypointResult", "Outcome"]
