from __future__ import annotations

import logging

from api.services.byte_reader import BIG, ByteReader
from api.services.errors import InvalidSignatureError, OutOfRangeError
from api.services.records import DEFAULT_DPI, MetadataRecord, per_cm_to_dpi


logger = logging.getLogger(__name__)

MARKER_PREFIX = 0xFF
SOI = 0xD8
EOI = 0xD9
SOS = 0xDA
APP0 = 0xE0

# C4 is DHT, C8 is reserved (JPG), CC is DAC; none of them carry a frame header
NON_SOF_MARKERS = {0xC4, 0xC8, 0xCC}

# markers without a length field
STANDALONE_MARKERS = {0x01} | set(range(0xD0, 0xD8))

JFIF_IDENTIFIER = "JFIF\x00"
SOF_MIN_LENGTH = 8  # length field through component count
JFIF_MIN_LENGTH = 14  # length field through y density
UNIT_DPI = 1
UNIT_DPCM = 2

DEFAULT_COLOR_DEPTH = 24


def is_sof(marker: int) -> bool:
	return 0xC0 <= marker <= 0xCF and marker not in NON_SOF_MARKERS


def decode_jpeg(data: bytes, filename: str) -> MetadataRecord:
	r = ByteReader(data, BIG)
	if r.u8(0) != MARKER_PREFIX or r.u8(1) != SOI:
		raise InvalidSignatureError("Not a valid JPEG file")

	width = 0
	height = 0
	color_depth = DEFAULT_COLOR_DEPTH
	res_x = res_y = DEFAULT_DPI
	frame_found = False

	offset = 2
	while r.has(offset, 2):
		if r.u8(offset) != MARKER_PREFIX:
			logger.debug("%s: expected marker at offset %d, stopping", filename, offset)
			break
		marker = r.u8(offset + 1)
		if marker == MARKER_PREFIX:
			# fill byte
			offset += 1
			continue
		if marker in STANDALONE_MARKERS:
			offset += 2
			continue
		if marker in (EOI, SOS):
			break
		length = r.u16(offset + 2)
		if length < 2:
			raise OutOfRangeError(f"Invalid segment length {length} at offset {offset}")
		logger.debug("%s: marker 0x%02X length=%d at offset %d", filename, marker, length, offset)

		if is_sof(marker) and not frame_found and length >= SOF_MIN_LENGTH:
			precision = r.u8(offset + 4)
			height = r.u16(offset + 5)
			width = r.u16(offset + 7)
			components = r.u8(offset + 9)
			color_depth = precision * components
			frame_found = True
		elif marker == APP0 and length >= JFIF_MIN_LENGTH:
			if r.ascii(offset + 4, offset + 9) == JFIF_IDENTIFIER:
				units = r.u8(offset + 11)
				x_density = r.u16(offset + 12)
				y_density = r.u16(offset + 14)
				if units == UNIT_DPI:
					res_x, res_y = x_density, y_density
				elif units == UNIT_DPCM:
					res_x = per_cm_to_dpi(x_density)
					res_y = per_cm_to_dpi(y_density)

		# marker (2) + segment, whose length counts its own 2-byte field.
		# A cut inside a field read above raises; a cut tail ends the walk here.
		offset += length + 2

	return MetadataRecord(
		filename=filename,
		width=width,
		height=height,
		resolution_x=res_x,
		resolution_y=res_y,
		color_depth=color_depth,
		compression="JPEG",
		format="JPEG",
	)
