from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from PIL import Image

from photoframe.services.errors import DecodeError
from photoframe.services.exif_encoder import apply_metadata_edits
from photoframe.services.exif_interpreter import ERROR_PREFIX, interpret
from photoframe.services.exif_reader import RawTagEntry, read_image_tags, read_tag_directory
from photoframe.services.image_utils import open_image
from photoframe.services.overlay import composite


logger = logging.getLogger(__name__)


@dataclass
class FramedPhoto:
	image: Image.Image
	caption: str
	# in-memory tag set with the caption's ISO edit applied
	tags: List[RawTagEntry] = field(default_factory=list)


def format_metadata(lines: Iterable[str]) -> str:
	return "".join(f"{line}\n" for line in lines)


def parse_metadata_text(text: str) -> List[str]:
	return [line for line in text.splitlines() if line]


def extract_metadata(image_bytes: bytes) -> List[str]:
	"""
	Display lines for the recognised tags, in directory order.
	An unreadable image or tag directory gives a single error line instead.
	"""
	try:
		entries = read_tag_directory(image_bytes)
	except DecodeError as e:
		logger.warning("Could not read tag directory: %s", e)
		return [f"{ERROR_PREFIX}{e}"]
	return interpret(entries)


def update_tag_directory(image_bytes: bytes, metadata_text: str) -> List[RawTagEntry]:
	entries = read_tag_directory(image_bytes)
	return apply_metadata_edits(entries, parse_metadata_text(metadata_text))


def frame_photo(image_bytes: bytes, metadata_text: str) -> FramedPhoto:
	"""
	Encode path: apply the ISO edit from metadata_text to the image's tag set
	and burn the text, collapsed to one line, into a framed copy of the pixels.
	Raises DecodeError when the pixels cannot be decoded.
	"""
	img = open_image(image_bytes)
	lines = parse_metadata_text(metadata_text)
	tags: List[RawTagEntry] = []
	try:
		tags = apply_metadata_edits(read_image_tags(img, image_bytes), lines)
	except DecodeError as e:
		# pixels are fine, only the tag block is bad: still frame the photo
		logger.warning("Tag directory not updated: %s", e)
	caption = " ".join(lines)
	return FramedPhoto(image=composite(img, caption), caption=caption, tags=tags)
