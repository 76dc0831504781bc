from __future__ import annotations

import logging

from api.services.byte_reader import LITTLE, ByteReader
from api.services.errors import InvalidSignatureError, OutOfRangeError
from api.services.records import DEFAULT_DPI, MetadataRecord


logger = logging.getLogger(__name__)

PCX_MANUFACTURER = 10
ENCODING_RLE = 1

# 16-colour EGA palette occupies bytes 16..63, reserved byte 64
PLANES_OFFSET = 65

VERSIONS = {
	0: "2.5",
	2: "2.8 with palette",
	3: "2.8 without palette",
	4: "Paintbrush for Windows",
	5: "3.0",
}


def decode_pcx(data: bytes, filename: str) -> MetadataRecord:
	r = ByteReader(data, LITTLE)
	if r.u8(0) != PCX_MANUFACTURER:
		raise InvalidSignatureError("Not a valid PCX file")

	version = r.u8(1)
	logger.debug("%s: PCX version %d (%s)", filename, version, VERSIONS.get(version, "unknown"))

	encoding = r.u8(2)
	bits_per_pixel = r.u8(3)

	x_min = r.u16(4)
	y_min = r.u16(6)
	x_max = r.u16(8)
	y_max = r.u16(10)

	h_dpi = r.u16(12)
	v_dpi = r.u16(14)

	planes = r.u8(PLANES_OFFSET)

	if x_max < x_min or y_max < y_min:
		raise OutOfRangeError(f"Invalid PCX bounding box ({x_min}, {y_min})-({x_max}, {y_max})")

	return MetadataRecord(
		filename=filename,
		# bounds are inclusive
		width=x_max - x_min + 1,
		height=y_max - y_min + 1,
		resolution_x=h_dpi or DEFAULT_DPI,
		resolution_y=v_dpi or DEFAULT_DPI,
		color_depth=bits_per_pixel * planes,
		compression="RLE" if encoding == ENCODING_RLE else "None",
		format="PCX",
	)
