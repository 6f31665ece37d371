from __future__ import annotations

import struct
from io import BytesIO
from typing import Iterable, Optional, Tuple

import piexif
import pytest
from PIL import Image


CAMERA_EXIF = {
	"0th": {
		piexif.ImageIFD.Make: b"Canon",
		piexif.ImageIFD.Model: b"EOS 5D Mark IV",
	},
	"Exif": {
		piexif.ExifIFD.ISOSpeedRatings: 400,
		piexif.ExifIFD.DateTimeOriginal: b"2023:07:01 14:32:00",
		piexif.ExifIFD.ShutterSpeedValue: (7, 1),
	},
}

CAMERA_LINES = ["Canon", "EOS 5D Mark IV", "ISO 400", "2023:07:01", "1/128 sec"]


def make_image_bytes(
	fmt: str = "JPEG",
	exif: Optional[bytes] = None,
	size: Tuple[int, int] = (64, 48),
	color: Tuple[int, int, int] = (30, 60, 200),
) -> bytes:
	img = Image.new("RGB", size, color)
	buf = BytesIO()
	if exif is not None:
		img.save(buf, format=fmt, exif=exif)
	else:
		img.save(buf, format=fmt)
	return buf.getvalue()


def build_tiff(entries: Iterable[Tuple[int, int, int, bytes]], endian: str = "<") -> bytes:
	"""Single-IFD TIFF block; every value must fit inline (4 bytes or less)."""
	entries = list(entries)
	out = (b"II" if endian == "<" else b"MM") + struct.pack(endian + "HI", 42, 8)
	out += struct.pack(endian + "H", len(entries))
	for tag, type_code, count, value in entries:
		out += struct.pack(endian + "HHI", tag, type_code, count) + value.ljust(4, b"\x00")
	out += struct.pack(endian + "I", 0)
	return out


@pytest.fixture
def camera_jpeg() -> bytes:
	return make_image_bytes(exif=piexif.dump(CAMERA_EXIF))


@pytest.fixture
def plain_png() -> bytes:
	return make_image_bytes(fmt="PNG")
