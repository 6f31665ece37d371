from __future__ import annotations

from io import BytesIO

import piexif
import pytest
from PIL import Image

from conftest import CAMERA_LINES, make_image_bytes
from photoframe.services.errors import DecodeError
from photoframe.services.exif_reader import read_tag_directory
from photoframe.services.image_utils import encode_jpeg, is_image_file, output_filename
from photoframe.services.metadata import (
	extract_metadata,
	format_metadata,
	frame_photo,
	parse_metadata_text,
	update_tag_directory,
)


def test_extract_metadata_from_camera_jpeg(camera_jpeg):
	assert extract_metadata(camera_jpeg) == CAMERA_LINES


def test_extract_metadata_from_png_with_exif():
	data = make_image_bytes(fmt="PNG", exif=piexif.dump({"0th": {piexif.ImageIFD.Make: b"Leica"}}))
	assert extract_metadata(data) == ["Leica"]


def test_unreadable_image_gives_one_error_line():
	lines = extract_metadata(b"\x00\x01\x02 garbage")
	assert len(lines) == 1
	assert lines[0].startswith("Error reading metadata: ")


def test_broken_tag_block_gives_one_error_line():
	data = make_image_bytes(exif=b"Exif\x00\x00II*\x00\xff\xff\x00\x00")
	lines = extract_metadata(data)
	assert len(lines) == 1
	assert lines[0].startswith("Error reading metadata: ")


def test_text_format_round_trip():
	text = format_metadata(CAMERA_LINES)
	assert text == "Canon\nEOS 5D Mark IV\nISO 400\n2023:07:01\n1/128 sec\n"
	assert parse_metadata_text(text) == CAMERA_LINES
	assert parse_metadata_text("ISO 100\r\n\r\nCanon") == ["ISO 100", "Canon"]


def test_unedited_text_reproduces_iso_payload(camera_jpeg):
	text = format_metadata(extract_metadata(camera_jpeg))
	original = [e for e in read_tag_directory(camera_jpeg) if e.id == 0x8827]
	updated = [e for e in update_tag_directory(camera_jpeg, text) if e.id == 0x8827]
	assert len(updated) == 1
	assert updated[0].payload == original[0].payload


def test_edited_iso_is_merged(camera_jpeg):
	text = format_metadata(extract_metadata(camera_jpeg)).replace("ISO 400", "ISO 800")
	updated = [e for e in update_tag_directory(camera_jpeg, text) if e.id == 0x8827]
	assert updated[0].payload == b"\x20\x03"


def test_frame_photo(camera_jpeg):
	text = format_metadata(extract_metadata(camera_jpeg))
	framed = frame_photo(camera_jpeg, text)
	# 64 * 0.014 rounds to a 1px frame
	assert framed.image.size == (66, 50)
	assert framed.caption == "Canon EOS 5D Mark IV ISO 400 2023:07:01 1/128 sec"
	assert any(e.id == 0x8827 for e in framed.tags)


def test_frame_photo_with_broken_tags_still_frames():
	data = make_image_bytes(exif=b"Exif\x00\x00II*\x00\xff\xff\x00\x00", size=(200, 100))
	framed = frame_photo(data, "ISO 100")
	assert framed.image.size == (206, 106)
	assert framed.tags == []


def test_frame_photo_rejects_undecodable_image():
	with pytest.raises(DecodeError):
		frame_photo(b"nope", "ISO 100")


def test_encode_jpeg_is_a_jpeg(camera_jpeg):
	framed = frame_photo(camera_jpeg, "ISO 400")
	img = Image.open(BytesIO(encode_jpeg(framed.image)))
	assert img.format == "JPEG"
	assert img.size == (66, 50)


def test_output_filename():
	assert output_filename("holiday/DSC_0042.png") == "DSC_0042_EXIF.jpg"


@pytest.mark.parametrize("name,expected", [
	("a.JPG", True),
	("a.jpeg", True),
	("a.tiff", True),
	("a.gif", True),
	("a.bmp", True),
	("a.png", True),
	("a.tif", False),
	("a.txt", False),
	("noext", False),
])
def test_is_image_file(name, expected):
	assert is_image_file(name) is expected
