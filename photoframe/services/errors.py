from __future__ import annotations


class PhotoFrameError(ValueError):
	pass


class DecodeError(PhotoFrameError):
	"""The image container is unsupported, corrupt or truncated."""


class TagDecodeError(PhotoFrameError):
	"""A single tag's payload could not be interpreted."""


class EncodeError(PhotoFrameError):
	"""A value cannot be encoded into a tag payload."""
