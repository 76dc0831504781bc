from __future__ import annotations


class DecodeError(Exception):
	"""Base class for header decode failures. `kind` names the failure category."""

	kind = "DecodeError"


class InvalidSignatureError(DecodeError):
	kind = "InvalidSignature"


class OutOfRangeError(DecodeError):
	kind = "OutOfRange"


class UnsupportedFormatError(DecodeError):
	kind = "UnsupportedFormat"
