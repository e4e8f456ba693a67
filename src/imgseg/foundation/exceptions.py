"""
imgseg exception hierarchy.

Provides user-friendly exceptions with helpful error messages and suggestions.
All imgseg-specific exceptions inherit from ImgSegError for easy catching.

None of these are retryable: a corrupted genotype, an empty population or an
invalid configuration aborts the run.

Example:
    try:
        result = SegmentationNSGAII(cfg).run(graph, seed=1)
    except ImgSegError as e:
        print(f"Segmentation failed: {e}")
        print(f"Suggestion: {e.suggestion}")
"""

from __future__ import annotations

from typing import Any


class ImgSegError(Exception):
    """
    Base exception for all imgseg errors.

    Attributes:
        message: Human-readable error description
        suggestion: Optional suggestion for fixing the error
        details: Optional dict with additional context
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message with suggestion."""
        msg = self.message
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ImgSegError):
    """Raised when run parameters are missing or out of range."""

    pass


class InvalidOperatorError(ConfigurationError):
    """Raised when an unknown operator is specified."""

    def __init__(
        self,
        operator_type: str,
        operator_name: str,
        available: list[str] | None = None,
    ) -> None:
        message = f"Unknown {operator_type} operator '{operator_name}'."
        suggestion = f"Available {operator_type} operators: {', '.join(available)}" if available else None
        super().__init__(
            message,
            suggestion,
            {"operator_type": operator_type, "operator_name": operator_name},
        )


class MissingConfigError(ConfigurationError):
    """Raised when required configuration is missing."""

    def __init__(self, field: str, config_class: str | None = None) -> None:
        message = f"Missing required configuration: '{field}'."
        suggestion = f"Add '{field}' to your configuration"
        if config_class:
            suggestion += f" or use {config_class}.default() for sensible defaults"
        super().__init__(message, suggestion, {"field": field})


# =============================================================================
# Genotype Errors
# =============================================================================


class GenotypeError(ImgSegError):
    """Base class for chromosome-related errors."""

    pass


class DecodeError(GenotypeError):
    """Raised when a chromosome symbol does not point to a valid 8-neighbour of its pixel."""

    def __init__(self, message: str, pixel: int | None = None, symbol: int | None = None) -> None:
        suggestion = "The chromosome is corrupted; variation operators must only emit symbols legal at each pixel"
        super().__init__(message, suggestion, {"pixel": pixel, "symbol": symbol})


# =============================================================================
# Ranking Errors
# =============================================================================


class RankingError(ImgSegError):
    """Base class for Pareto ranking errors."""

    pass


class EmptyFrontError(RankingError):
    """Raised when ranking or crowding is requested for an empty set of individuals."""

    def __init__(self, message: str = "Cannot rank an empty population.") -> None:
        suggestion = "Check that pop_size is positive and that the population was initialized"
        super().__init__(message, suggestion)


# =============================================================================
# Data/IO Errors
# =============================================================================


class DataError(ImgSegError):
    """Base class for data-related errors."""

    pass


class ImageLoadError(DataError):
    """Raised when an input image cannot be read."""

    def __init__(self, path: str, reason: str | None = None) -> None:
        message = f"Could not load image '{path}'."
        if reason:
            message += f" {reason}"
        suggestion = "Check the path and that the file is a raster format Pillow can open"
        super().__init__(message, suggestion, {"path": path})


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Base
    "ImgSegError",
    # Configuration
    "ConfigurationError",
    "InvalidOperatorError",
    "MissingConfigError",
    # Genotype
    "GenotypeError",
    "DecodeError",
    # Ranking
    "RankingError",
    "EmptyFrontError",
    # Data/IO
    "DataError",
    "ImageLoadError",
]
