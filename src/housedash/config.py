"""
Configuration constants for housedash.

This module centralises configuration values that are used across the
rendering engine.  New values should be added here deliberately.
Values that operators may want to tune without editing the JSON
configuration are read from environment variables with a fixed default.
"""

import os
from typing import Final

# Branding used in the command-line help.
PROJECT_NAME: Final[str] = "housedash"

# Timezone used for axis labels and "last updated" footers when the
# style does not name one.
TIMEZONE_DEFAULT: Final[str] = os.getenv("HOUSEDASH_TZ", "UTC")

# Directory where bitmaps are written when no --out-dir is given.
OUTPUT_DIR_DEFAULT: Final[str] = os.getenv("HOUSEDASH_OUTPUT_DIR", "artifacts/charts")

# Retry policy for data fetches.  With four attempts and a base of 8
# seconds the waits are 8, 16 and 32 seconds, about one minute in total.
RETRY_MAX_ATTEMPTS: Final[int] = 4
RETRY_BASE_SECONDS: Final[float] = float(os.getenv("HOUSEDASH_RETRY_BASE_SECONDS", "8"))

# Font sizes in points before the style font scale is applied.
TITLE_FONT_SIZE: Final[float] = 16.0
LABEL_FONT_SIZE: Final[float] = 8.0

# Number of colored steps in colorbars and load bars.
GRADIENT_STEPS: Final[int] = 61

# Default lookback windows and resampling period.
TREND_PERIOD_DEFAULT_SECONDS: Final[int] = 3600

__all__ = [
    "PROJECT_NAME",
    "TIMEZONE_DEFAULT",
    "OUTPUT_DIR_DEFAULT",
    "RETRY_MAX_ATTEMPTS",
    "RETRY_BASE_SECONDS",
    "TITLE_FONT_SIZE",
    "LABEL_FONT_SIZE",
    "GRADIENT_STEPS",
    "TREND_PERIOD_DEFAULT_SECONDS",
]
