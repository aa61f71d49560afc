"""Layout, export and logging constants."""

from __future__ import annotations

import os

# Field rectangles are stored in pixels at this DPI; PDF output is in points.
CANONICAL_DPI = 96
POINTS_PER_INCH = 72

DEFAULT_FIELD_WIDTH = 150.0
DEFAULT_FIELD_HEIGHT = 40.0
CHECKBOX_FIELD_SIZE = 20.0
DEFAULT_FIELD_ORIGIN = (100.0, 100.0)
MIN_FIELD_WIDTH = 20.0
MIN_FIELD_HEIGHT = 15.0
DUPLICATE_OFFSET = 12.0

MOBILE_BREAKPOINT_PX = 768
MOBILE_GUTTER_PX = 16.0
PAGE_GAP_PX = 32.0
NAV_CHROME_HEIGHT_PX = 80.0

EXPORT_FONT = "Helvetica"
EXPORT_FONT_SIZE = 12.0
CHECK_GLYPH_FONT = "ZapfDingbats"
CHECK_GLYPH = "4"
CHECK_GLYPH_SIZE = 14.0
SIGNATURE_PLACEHOLDER = "[Signature]"

# Text written into date fields when a fill session starts with a default date.
DATE_FORMAT = "%m/%d/%Y"

LOG_LEVEL = os.environ.get("FORMSIGN_LOG_LEVEL", "INFO").upper()
