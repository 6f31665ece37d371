from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from photoframe import config
from photoframe.services.image_utils import PixelBuffer, to_pil_image


logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]
Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


@dataclass(frozen=True)
class OverlaySpec:
	frame_thickness: int
	font_size: int
	caption_origin: Tuple[int, int]
	frame_color: Color = config.FRAME_COLOR
	caption_color: Color = config.CAPTION_COLOR

	def output_size(self, width: int, height: int) -> Tuple[int, int]:
		return (width + 2 * self.frame_thickness, height + 2 * self.frame_thickness)


def compute_overlay_spec(width: int, height: int) -> OverlaySpec:
	# height does not enter the layout; both sides scale with the width
	frame = int(round(width * config.FRAME_RATIO))
	font_size = int(round(width * config.FONT_RATIO))
	origin = (0, int(round(frame * config.CAPTION_Y_RATIO)))
	return OverlaySpec(frame_thickness=frame, font_size=font_size, caption_origin=origin)


def collapse_caption(text: str) -> str:
	return " ".join(line for line in text.splitlines() if line)


def load_caption_font(size: int) -> Tuple[Font, bool]:
	"""Return (font, is_bold). Falls back to Pillow's default face when no bold TrueType font is found."""
	size = max(1, int(size))
	candidates = config.CAPTION_FONTS
	if config.CAPTION_FONT_OVERRIDE:
		candidates = (config.CAPTION_FONT_OVERRIDE,) + candidates
	for name in candidates:
		try:
			return ImageFont.truetype(name, size), True
		except OSError:
			continue
	logger.debug("No bold caption font found, using Pillow default at %dpx", size)
	return ImageFont.load_default(size=size), False


def _prepare_source(img: Image.Image) -> Image.Image:
	if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
		return img.convert("RGBA")
	if img.mode != "RGB":
		return img.convert("RGB")
	return img


def composite(image: PixelBuffer, caption: str) -> Image.Image:
	src = to_pil_image(image)
	w, h = src.size
	spec = compute_overlay_spec(w, h)
	t = spec.frame_thickness

	canvas = Image.new("RGB", spec.output_size(w, h), spec.frame_color)
	src = _prepare_source(src)
	canvas.paste(src, (t, t), src if src.mode == "RGBA" else None)

	line = collapse_caption(caption)
	if line:
		font, is_bold = load_caption_font(spec.font_size)
		draw = ImageDraw.Draw(canvas)
		# fake the bold weight with a stroke when only a regular face is available
		stroke = 0 if is_bold else max(0, spec.font_size // 24)
		draw.text(
			spec.caption_origin,
			line,
			fill=spec.caption_color,
			font=font,
			stroke_width=stroke,
			stroke_fill=spec.caption_color,
		)
	return canvas
