from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from photoframe import config
from photoframe.services.errors import DecodeError


PixelBuffer = Union[Image.Image, np.ndarray]


def open_image(image_bytes: bytes) -> Image.Image:
	"""Decode a whole image from memory, raising DecodeError on unsupported or truncated data."""
	try:
		img = Image.open(BytesIO(image_bytes))
		img.load()
	except (OSError, ValueError, Image.DecompressionBombError) as e:
		raise DecodeError(str(e) or type(e).__name__) from e
	return img


def is_image_file(name: Union[str, Path]) -> bool:
	return Path(name).suffix.lower() in config.SUPPORTED_IMAGE_EXTS


def to_pil_image(buffer: PixelBuffer) -> Image.Image:
	if isinstance(buffer, Image.Image):
		return buffer
	arr = np.asarray(buffer)
	if arr.dtype != np.uint8:
		arr = np.clip(arr, 0, 255).astype(np.uint8)
	if arr.ndim == 2:
		return Image.fromarray(arr, mode="L")
	if arr.ndim == 3 and arr.shape[2] == 3:
		return Image.fromarray(arr, mode="RGB")
	if arr.ndim == 3 and arr.shape[2] == 4:
		return Image.fromarray(arr, mode="RGBA")
	raise ValueError("Expected HxW, HxWx3 or HxWx4 pixel array")


def encode_jpeg(img: Image.Image, quality: int = config.JPEG_QUALITY) -> bytes:
	if img.mode != "RGB":
		img = img.convert("RGB")
	buf = BytesIO()
	img.save(buf, format="JPEG", quality=quality)
	return buf.getvalue()


def output_filename(source_name: Union[str, Path]) -> str:
	return f"{Path(source_name).stem}{config.OUTPUT_SUFFIX}.jpg"
