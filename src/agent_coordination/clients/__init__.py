"""Text generator backends.

All backends implement the BaseTextGenerator interface: a prompt string
goes in, raw text comes out. Provider SDKs are imported lazily through
the factory so that only the selected provider needs to be installed.
"""

from .base import BaseTextGenerator, with_retry
from .factory import create_generator, get_available_providers, get_default_model

__all__ = [
    "BaseTextGenerator",
    "create_generator",
    "get_available_providers",
    "get_default_model",
    "with_retry",
]
