from __future__ import annotations

import logging
from typing import Optional, Tuple

from api.services.byte_reader import BIG, ByteReader
from api.services.errors import InvalidSignatureError
from api.services.records import DEFAULT_DPI, MetadataRecord, ppm_to_dpi


logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# length(4) + type(4) before the payload, crc(4) after it
CHUNK_HEADER_SIZE = 8
CHUNK_OVERHEAD = 12

PHYS_PAYLOAD_SIZE = 9
UNIT_METER = 1

# colour type -> channels per pixel; palette and greyscale keep the bit depth as is
CHANNELS_BY_COLOR_TYPE = {
	2: 3,  # truecolour
	4: 2,  # greyscale + alpha
	6: 4,  # truecolour + alpha
}

COMPRESSION_TYPES = {
	0: "Deflate",
}


def _find_phys(r: ByteReader) -> Optional[Tuple[int, int, int]]:
	"""
	Walk chunks after the signature until pHYs, IEND or the end of the buffer.
	Returns (x_ppu, y_ppu, unit) or None when no complete pHYs chunk is present.
	"""
	offset = len(PNG_SIGNATURE)
	while r.has(offset, CHUNK_HEADER_SIZE):
		length = r.u32(offset)
		chunk_type = r.ascii(offset + 4, offset + 8)
		logger.debug("chunk %r length=%d at offset %d", chunk_type, length, offset)
		if chunk_type == "pHYs":
			payload = offset + CHUNK_HEADER_SIZE
			if not r.has(payload, PHYS_PAYLOAD_SIZE):
				logger.debug("truncated pHYs chunk at offset %d", offset)
				return None
			return r.u32(payload), r.u32(payload + 4), r.u8(payload + 8)
		if chunk_type == "IEND":
			return None
		offset += length + CHUNK_OVERHEAD
	return None


def decode_png(data: bytes, filename: str) -> MetadataRecord:
	r = ByteReader(data, BIG)
	if r.raw(0, len(PNG_SIGNATURE)) != PNG_SIGNATURE:
		raise InvalidSignatureError("Not a valid PNG file")

	# IHDR is always the first chunk: payload starts at 16
	width = r.u32(16)
	height = r.u32(20)
	bit_depth = r.u8(24)
	color_type = r.u8(25)
	compression_method = r.u8(26)

	color_depth = bit_depth * CHANNELS_BY_COLOR_TYPE.get(color_type, 1)

	res_x = res_y = DEFAULT_DPI
	phys = _find_phys(r)
	if phys is not None:
		x_ppu, y_ppu, unit = phys
		if unit == UNIT_METER:
			res_x = ppm_to_dpi(x_ppu)
			res_y = ppm_to_dpi(y_ppu)

	return MetadataRecord(
		filename=filename,
		width=width,
		height=height,
		resolution_x=res_x,
		resolution_y=res_y,
		color_depth=color_depth,
		compression=COMPRESSION_TYPES.get(compression_method, f"Unknown ({compression_method})"),
		format="PNG",
	)
