from __future__ import annotations

import logging
import struct
from typing import Callable, Dict, Iterable, List, Optional

import piexif

from photoframe.services.errors import TagDecodeError
from photoframe.services.exif_reader import RawTagEntry


logger = logging.getLogger(__name__)

ISO_TAG = piexif.ExifIFD.ISOSpeedRatings  # 0x8827
MAKE_TAG = piexif.ImageIFD.Make  # 0x010F
MODEL_TAG = piexif.ImageIFD.Model  # 0x0110
SHUTTER_SPEED_TAG = piexif.ExifIFD.ShutterSpeedValue  # 0x9201
DATE_TAKEN_TAG = piexif.ExifIFD.DateTimeOriginal  # 0x9003

ERROR_PREFIX = "Error reading metadata: "


def _ascii(payload: bytes) -> str:
	return payload.decode("ascii", errors="replace")


def _need(entry: RawTagEntry, size: int, what: str) -> None:
	if len(entry.payload) < size:
		raise TagDecodeError(f"{what} needs {size} bytes, got {len(entry.payload)}")


def iso_line(entry: RawTagEntry) -> Optional[str]:
	_need(entry, 2, "ISO")
	(value,) = struct.unpack_from("<H", entry.payload, 0)
	return f"ISO {value}"


def ascii_line(entry: RawTagEntry) -> Optional[str]:
	return _ascii(entry.payload).strip("\x00")


def shutter_speed_line(entry: RawTagEntry) -> Optional[str]:
	"""
	ShutterSpeedValue is an APEX rational: exposure time = 2 ** -(num/den).
	Exposures of one second or more come out as "1/0 sec" or "1/1 sec".
	"""
	_need(entry, 8, "Shutter speed")
	num, den = struct.unpack_from("<ii", entry.payload, 0)
	if den == 0:
		return None
	try:
		exposure_time = 2.0 ** (-num / den)
		return f"1/{round(1 / exposure_time)} sec"
	except (OverflowError, ZeroDivisionError) as e:
		raise TagDecodeError(f"shutter speed {num}/{den} out of range") from e


def date_taken_line(entry: RawTagEntry) -> Optional[str]:
	# "YYYY:MM:DD HH:MM:SS" -> date part only
	text = _ascii(entry.payload).strip("\x00").strip()
	return text.split(" ")[0]


TAG_DECODERS: Dict[int, Callable[[RawTagEntry], Optional[str]]] = {
	ISO_TAG: iso_line,
	MAKE_TAG: ascii_line,
	MODEL_TAG: ascii_line,
	SHUTTER_SPEED_TAG: shutter_speed_line,
	DATE_TAKEN_TAG: date_taken_line,
}


def describe_entry(entry: RawTagEntry) -> Optional[str]:
	"""Display line for one entry, None when the tag is not shown. Raises TagDecodeError."""
	decoder = TAG_DECODERS.get(entry.id)
	if decoder is None:
		return None
	return decoder(entry)


def interpret(entries: Iterable[RawTagEntry]) -> List[str]:
	lines: List[str] = []
	for entry in entries:
		try:
			line = describe_entry(entry)
		except TagDecodeError as e:
			logger.warning("Tag 0x%04X could not be decoded: %s", entry.id, e)
			lines.append(f"{ERROR_PREFIX}{e}")
			continue
		if line is not None:
			lines.append(line)
	return lines
