from __future__ import annotations

import logging
import re
import struct
from typing import Iterable, List, Optional

import piexif

from photoframe.services.errors import EncodeError
from photoframe.services.exif_interpreter import ISO_TAG
from photoframe.services.exif_reader import RawTagEntry


logger = logging.getLogger(__name__)

# Edited ISO tags are written with the ASCII type code, whatever the source used
ISO_TYPE_CODE = piexif.TYPES.Ascii

_INT32_RE = re.compile(r"[+-]?[0-9]+")
_INT32_MIN, _INT32_MAX = -(2 ** 31), 2 ** 31 - 1


def encode_iso(value: int) -> RawTagEntry:
	if isinstance(value, bool) or not isinstance(value, int):
		raise EncodeError(f"ISO must be an integer, got {value!r}")
	if not 0 <= value <= 0xFFFF:
		raise EncodeError(f"ISO {value} out of range 0..65535")
	return RawTagEntry(ISO_TAG, ISO_TYPE_CODE, struct.pack("<H", value))


def parse_iso_line(line: str) -> Optional[int]:
	"""
	Parse an "ISO <n>" display line back into its integer.

	Every "ISO" literal is removed and the rest must be a plain 32-bit
	integer (optional sign, ASCII digits, surrounding whitespace).
	Returns None for anything else.
	"""
	if not line.startswith("ISO"):
		return None
	rest = line.replace("ISO", "").strip()
	if not _INT32_RE.fullmatch(rest):
		return None
	value = int(rest)
	if not _INT32_MIN <= value <= _INT32_MAX:
		return None
	return value


def iso_values(lines: Iterable[str]) -> List[int]:
	values = []
	for line in lines:
		v = parse_iso_line(line)
		if v is not None:
			values.append(v)
	return values


def apply_metadata_edits(entries: Iterable[RawTagEntry], lines: Iterable[str]) -> List[RawTagEntry]:
	"""
	Merge the ISO lines of an edited metadata block into a tag set.

	Only ISO round-trips; every other line is display-only. The last valid
	ISO line wins and replaces the existing ISO entries in place (or is
	appended). Returns a new list.
	"""
	out = list(entries)
	iso_entry: Optional[RawTagEntry] = None
	for value in iso_values(lines):
		try:
			iso_entry = encode_iso(value)
		except EncodeError as e:
			logger.warning("Skipping ISO edit: %s", e)
	if iso_entry is None:
		return out

	positions = [i for i, e in enumerate(out) if e.id == ISO_TAG]
	if not positions:
		out.append(iso_entry)
		return out
	out[positions[0]] = iso_entry
	return [e for i, e in enumerate(out) if i not in positions[1:]]
