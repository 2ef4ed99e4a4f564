"""
Constants for binarization and the boundary scan.

This module contains defaults used when the caller does not supply its own
threshold or progress driver.
"""

# =============================================================================
# Binarization Constants
# =============================================================================

# Brightness threshold applied when none is given (slider midpoint)
DEFAULT_THRESHOLD = 128

# Valid threshold range (inclusive)
MIN_THRESHOLD = 0
MAX_THRESHOLD = 255

# Pixel values written by mask_to_image()
BACKGROUND_VALUE = 255  # White
FOREGROUND_VALUE = 0    # Black


# =============================================================================
# Progress Driver Constants
# =============================================================================

# Ticks delivered per phase by the default driver
# A 3 second sweep per phase at 60 ticks per second
DEFAULT_PROGRESS_STEPS = 180

# Fewer ticks than this cannot reach both 0.0 and 1.0
MIN_PROGRESS_STEPS = 2

# Progress value at which an unsuccessful phase is declared stalled
PROGRESS_END = 1.0
