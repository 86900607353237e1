"""Payment slip helpers."""

from .uploader import SlipUploader
from .validation import validate_slip

__all__ = ["SlipUploader", "validate_slip"]
