from __future__ import annotations

import logging

from api.services.byte_reader import LITTLE, ByteReader
from api.services.errors import InvalidSignatureError
from api.services.records import DEFAULT_DPI, MetadataRecord, ppm_to_dpi


logger = logging.getLogger(__name__)

# BITMAPINFOHEADER and later carry biXPelsPerMeter / biYPelsPerMeter
INFO_HEADER_SIZE = 40

COMPRESSION_TYPES = {
	0: "None (BI_RGB)",
	1: "RLE 8-bit",
	2: "RLE 4-bit",
	3: "Bitfields",
	4: "JPEG",
	5: "PNG",
}


def decode_bmp(data: bytes, filename: str) -> MetadataRecord:
	r = ByteReader(data, LITTLE)
	if r.ascii(0, 2) != "BM":
		raise InvalidSignatureError("Not a valid BMP file")

	# 14-byte file header, then the DIB header
	dib_header_size = r.u32(14)
	width = r.i32(18)
	height = r.i32(22)  # negative -> top-down rows
	bits_per_pixel = r.u16(28)
	compression_method = r.u32(30)

	res_x = res_y = DEFAULT_DPI
	if dib_header_size >= INFO_HEADER_SIZE:
		x_ppm = r.i32(38)
		y_ppm = r.i32(42)
		if x_ppm > 0:
			res_x = ppm_to_dpi(x_ppm)
		if y_ppm > 0:
			res_y = ppm_to_dpi(y_ppm)
	else:
		logger.debug("%s: DIB header size %d has no resolution fields", filename, dib_header_size)

	return MetadataRecord(
		filename=filename,
		width=abs(width),
		height=abs(height),
		resolution_x=res_x,
		resolution_y=res_y,
		color_depth=bits_per_pixel,
		compression=COMPRESSION_TYPES.get(compression_method, f"Unknown ({compression_method})"),
		format="BMP",
	)
