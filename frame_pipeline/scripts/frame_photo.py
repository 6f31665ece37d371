from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from photoframe import config
from photoframe.services.errors import DecodeError
from photoframe.services.image_utils import encode_jpeg, is_image_file, output_filename
from photoframe.services.metadata import extract_metadata, format_metadata, frame_photo


logger = logging.getLogger(__name__)


def frame_file(input_path: Path, output_path: Optional[Path] = None, metadata_text: Optional[str] = None) -> Path:
    data = input_path.read_bytes()
    if metadata_text is None:
        metadata_text = format_metadata(extract_metadata(data))
    framed = frame_photo(data, metadata_text)
    if output_path is None:
        output_path = input_path.with_name(output_filename(input_path))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(encode_jpeg(framed.image))
    return output_path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Print EXIF metadata and write a framed, captioned JPEG")
    parser.add_argument("--input", required=True, help="Image file to read")
    parser.add_argument("--output", help="Output JPEG (default: <stem>_EXIF.jpg next to the input)")
    parser.add_argument("--metadata-file", help="Edited metadata text to use as caption instead of the extracted one")
    parser.add_argument("--print-only", action="store_true", help="Only print the metadata, do not write an image")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

    input_path = Path(args.input)
    if not is_image_file(input_path):
        raise SystemExit(f"Not an image file: {input_path}")

    data = input_path.read_bytes()
    metadata_text = format_metadata(extract_metadata(data))
    print(metadata_text, end="")
    if args.print_only:
        return 0

    if args.metadata_file:
        metadata_text = Path(args.metadata_file).read_text(encoding="utf-8")
    try:
        out = frame_file(input_path, Path(args.output) if args.output else None, metadata_text)
    except DecodeError as e:
        raise SystemExit(f"Error processing the image: {e}")
    print(f"Saved: {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
