"""Style handling for housedash.

See :mod:`housedash.style.models` for the configuration model and
:mod:`housedash.style.resolver` for color and font resolution.
"""

from .models import Style
from .palette import Color, SystemColor, SystemPalette
from .resolver import StyleResolver

__all__ = ["Style", "StyleResolver", "Color", "SystemColor", "SystemPalette"]
