from __future__ import annotations

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from photoframe.services.errors import DecodeError
from photoframe.services.image_utils import encode_jpeg, is_image_file, output_filename
from photoframe.services.metadata import (
	extract_metadata,
	format_metadata,
	frame_photo,
	update_tag_directory,
)


router = APIRouter(prefix="/photo", tags=["photo"])


def _read_image(file: UploadFile) -> bytes:
	if not is_image_file(file.filename or ""):
		raise HTTPException(status_code=400, detail="Please drop an image file.")
	return file.file.read()


@router.post("/metadata", summary="Read ISO, camera, shutter speed and date from an image")
def metadata(file: UploadFile = File(...)):
	data = _read_image(file)
	lines = extract_metadata(data)
	return {"filename": file.filename, "lines": lines, "text": format_metadata(lines)}


@router.post("/frame", summary="Frame an image and burn the metadata caption into it")
def frame(file: UploadFile = File(...), metadata: str = Form("")):
	data = _read_image(file)
	# no edited text supplied: caption with what the file carries
	text = metadata if metadata.strip() else format_metadata(extract_metadata(data))
	try:
		framed = frame_photo(data, text)
	except DecodeError as e:
		raise HTTPException(status_code=422, detail=f"Error processing the image: {e}")
	name = output_filename(file.filename or "image.jpg")
	return Response(
		content=encode_jpeg(framed.image),
		media_type="image/jpeg",
		headers={"Content-Disposition": f'attachment; filename="{name}"'},
	)


@router.post("/tags", summary="Tag set after applying the edited metadata")
def tags(file: UploadFile = File(...), metadata: str = Form("")):
	data = _read_image(file)
	try:
		entries = update_tag_directory(data, metadata)
	except DecodeError as e:
		raise HTTPException(status_code=422, detail=f"Error reading metadata: {e}")
	return {
		"filename": file.filename,
		"tags": [
			{"id": e.id, "type_code": e.type_code, "payload": e.payload.hex()}
			for e in entries
		],
	}
