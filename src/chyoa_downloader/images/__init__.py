"""Image download, conversion and embedding."""

from .localizer import ImageLocalizer, substitute_reference
from .transcode import transcode


__all__ = ["ImageLocalizer", "substitute_reference", "transcode"]
