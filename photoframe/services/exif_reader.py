from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple

import piexif
from PIL import Image

from photoframe.services.errors import DecodeError
from photoframe.services.image_utils import open_image


logger = logging.getLogger(__name__)

EXIF_HEADER = b"Exif\x00\x00"

# TIFF type code -> (bytes per value, byte-swap unit)
TYPE_SIZES: Dict[int, Tuple[int, int]] = {
	piexif.TYPES.Byte: (1, 1),
	piexif.TYPES.Ascii: (1, 1),
	piexif.TYPES.Short: (2, 2),
	piexif.TYPES.Long: (4, 4),
	piexif.TYPES.Rational: (8, 4),
	piexif.TYPES.SByte: (1, 1),
	piexif.TYPES.Undefined: (1, 1),
	piexif.TYPES.SShort: (2, 2),
	piexif.TYPES.SLong: (4, 4),
	piexif.TYPES.SRational: (8, 4),
	piexif.TYPES.Float: (4, 4),
	piexif.TYPES.DFloat: (8, 8),
	13: (4, 4),  # IFD offset
}

SUB_IFD_TAGS = (
	piexif.ImageIFD.ExifTag,
	piexif.ImageIFD.GPSTag,
	piexif.ExifIFD.InteroperabilityTag,
)


@dataclass(frozen=True)
class RawTagEntry:
	id: int
	type_code: int
	payload: bytes


def _to_little_endian(raw: bytes, unit: int) -> bytes:
	if unit == 1:
		return raw
	return b"".join(raw[i:i + unit][::-1] for i in range(0, len(raw), unit))


class _TiffWalker:
	"""
	Structural walk of a TIFF/EXIF tag block.

	Entries come out in directory order: IFD0, then each sub-IFD it points
	to (depth-first), then the next IFD of the chain. Payloads are returned
	little-endian whatever the block's byte order.
	"""

	def __init__(self, tiff: bytes):
		self.tiff = tiff
		if len(tiff) < 8:
			raise DecodeError("truncated TIFF header")
		mark = tiff[0:2]
		if mark == b"II":
			self.endian = "<"
		elif mark == b"MM":
			self.endian = ">"
		else:
			raise DecodeError(f"unknown byte order mark {mark!r}")
		magic, self.first_ifd = struct.unpack(self.endian + "HI", tiff[2:8])
		if magic != 42:
			raise DecodeError(f"bad TIFF magic {magic}")
		self.visited: Set[int] = set()

	def _require(self, start: int, length: int, what: str) -> None:
		if start < 0 or start + length > len(self.tiff):
			raise DecodeError(f"truncated {what} at offset {start}")

	def walk(self) -> List[RawTagEntry]:
		entries: List[RawTagEntry] = []
		# (offset, is main chain); popped LIFO so sub-IFDs come before the next IFD
		pending: List[Tuple[int, bool]] = [(self.first_ifd, True)]
		while pending:
			offset, chained = pending.pop()
			if not offset or offset in self.visited:
				continue
			sub_ifds, next_offset = self._read_ifd(offset, entries)
			if chained:
				pending.append((next_offset, True))
			pending.extend((sub, False) for sub in reversed(sub_ifds))
		return entries

	def _read_ifd(self, offset: int, entries: List[RawTagEntry]) -> Tuple[List[int], int]:
		self.visited.add(offset)
		self._require(offset, 2, "IFD")
		(count,) = struct.unpack(self.endian + "H", self.tiff[offset:offset + 2])
		self._require(offset + 2, count * 12, "IFD entries")

		sub_ifds: List[int] = []
		for i in range(count):
			pos = offset + 2 + i * 12
			tag, type_code, num = struct.unpack(self.endian + "HHI", self.tiff[pos:pos + 8])
			if type_code not in TYPE_SIZES:
				logger.debug("Skipping tag 0x%04X with unknown type %d", tag, type_code)
				continue
			value_size, unit = TYPE_SIZES[type_code]
			size = value_size * num
			if size <= 4:
				raw = self.tiff[pos + 8:pos + 8 + size]
			else:
				(value_offset,) = struct.unpack(self.endian + "I", self.tiff[pos + 8:pos + 12])
				self._require(value_offset, size, f"value of tag 0x{tag:04X}")
				raw = self.tiff[value_offset:value_offset + size]
			payload = raw if self.endian == "<" else _to_little_endian(raw, unit)
			entries.append(RawTagEntry(tag, type_code, payload))
			if tag in SUB_IFD_TAGS and len(payload) >= 4:
				sub_ifds.append(struct.unpack("<I", payload[:4])[0])

		next_pos = offset + 2 + count * 12
		next_offset = 0
		if next_pos + 4 <= len(self.tiff):
			(next_offset,) = struct.unpack(self.endian + "I", self.tiff[next_pos:next_pos + 4])

		return sub_ifds, next_offset


def walk_tiff(tiff: bytes) -> List[RawTagEntry]:
	return _TiffWalker(tiff).walk()


def exif_block(img: Image.Image, image_bytes: bytes) -> bytes:
	# TIFF files carry their tags in the container itself
	if img.format == "TIFF":
		return image_bytes
	exif = img.info.get("exif")
	if not exif:
		return b""
	if exif.startswith(EXIF_HEADER):
		exif = exif[len(EXIF_HEADER):]
	return exif


def read_tag_directory(image_bytes: bytes) -> List[RawTagEntry]:
	"""
	Decode the image and return every tag entry of its EXIF directory.
	Raises DecodeError when the container or the tag block is unreadable.
	"""
	return read_image_tags(open_image(image_bytes), image_bytes)


def read_image_tags(img: Image.Image, image_bytes: bytes) -> List[RawTagEntry]:
	tiff = exif_block(img, image_bytes)
	if not tiff:
		logger.debug("No EXIF block in %s image", img.format)
		return []
	try:
		return walk_tiff(tiff)
	except struct.error as e:
		raise DecodeError(f"malformed tag directory: {e}") from e
