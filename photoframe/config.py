from __future__ import annotations

import os
from typing import Tuple

# Frame and caption geometry, relative to the source image width
FRAME_RATIO = 0.014
FONT_RATIO = 0.008
CAPTION_Y_RATIO = 0.09

FRAME_COLOR: Tuple[int, int, int] = (0, 0, 0)
CAPTION_COLOR: Tuple[int, int, int] = (255, 165, 0)

# Bold faces tried in order; PHOTOFRAME_FONT (if set) goes first
CAPTION_FONTS: Tuple[str, ...] = (
	"arialbd.ttf",
	"Arial Bold.ttf",
	"DejaVuSans-Bold.ttf",
	"LiberationSans-Bold.ttf",
)
CAPTION_FONT_OVERRIDE = os.environ.get("PHOTOFRAME_FONT")

SUPPORTED_IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tiff"}

JPEG_QUALITY = int(os.environ.get("PHOTOFRAME_JPEG_QUALITY", "100"))
OUTPUT_SUFFIX = "_EXIF"

LOG_LEVEL = os.environ.get("PHOTOFRAME_LOG_LEVEL", "INFO")
