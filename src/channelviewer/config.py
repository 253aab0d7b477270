"""
Configuration & Constants
=========================
This module serves as the central registry for the viewer's global constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (zoom limits, slider ranges, colors)
   from being scattered throughout the model, controller and view code.
2. Consistency: The sampler, the obstacle extractor and the dialogs that feed
   them must agree on the same limits. They all read them from here.

Exports:
    ZOOM_MIN, ZOOM_MAX (float): Clamp range of the view zoom.
    RESOLUTION_MIN, RESOLUTION_MAX, RESOLUTION_DEFAULT (int): Channel raster size.
    TOLERANCE_MAX, CELL_SIZE_MIN, CELL_SIZE_MAX (int): Obstacle analysis limits.
"""
import sys

# =============================================================================
# APPLICATION
# =============================================================================
ORG_ID = "channelviewer"
APP_ID = "channel-area-viewer"
VISIBLE_APP_NAME = "Channel Area Viewer"

# =============================================================================
# VIEW TRANSFORM
# =============================================================================
ZOOM_MIN = 0.05
ZOOM_MAX = 1500.0
ZOOM_RATE = 0.005           # relative zoom per dragged pixel
DEFAULT_CANVAS_SIZE = (500, 500)

# =============================================================================
# CHANNEL SAMPLING
# =============================================================================
RESOLUTION_MIN = 30
RESOLUTION_MAX = 600
RESOLUTION_DEFAULT = 200

# Noise floor handed to SINR/probability queries: "no noise floor"
UNBOUNDED_NOISE_FLOOR = -sys.float_info.max

# =============================================================================
# COLORS (r, g, b, a)
# =============================================================================
RAMP_ALPHA = 0xCC
OVER_RANGE_COLOR = (0, 255, 0, RAMP_ALPHA)
UNDER_RANGE_COLOR = (255, 0, 0, RAMP_ALPHA)

OBSTACLE_FILL_COLOR = (0, 0, 0, 128)
MASK_PREVIEW_COLOR = (0x22, 0xFF, 0x22, 0x99)
SELECTED_RADIO_FILL = (255, 0, 0, 100)

# =============================================================================
# OBSTACLE ANALYSIS
# =============================================================================
TOLERANCE_MIN = 0
TOLERANCE_MAX = 128
CELL_SIZE_MIN = 1
CELL_SIZE_MAX = 40
CELL_SIZE_DEFAULT = 40

# =============================================================================
# RADIOS
# =============================================================================
RADIO_ICON_SIZE = (24, 24)  # on-screen pixels, independent of zoom
TRANSMISSION_DOT_SIZE = 5

IMAGE_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp)"
SESSION_FILE_FILTER = "Session files (*.h5)"
