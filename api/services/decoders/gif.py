from __future__ import annotations

from api.services.byte_reader import LITTLE, ByteReader
from api.services.errors import InvalidSignatureError
from api.services.records import DEFAULT_DPI, MetadataRecord


GIF_SIGNATURES = ("GIF87a", "GIF89a")


def decode_gif(data: bytes, filename: str) -> MetadataRecord:
	r = ByteReader(data, LITTLE)
	if r.ascii(0, 6) not in GIF_SIGNATURES:
		raise InvalidSignatureError("Not a valid GIF file")

	# logical screen descriptor
	width = r.u16(6)
	height = r.u16(8)
	packed = r.u8(10)

	has_global_table = bool(packed & 0x80)
	color_resolution = ((packed & 0x70) >> 4) + 1
	table_bits = (packed & 0x07) + 1

	return MetadataRecord(
		filename=filename,
		width=width,
		height=height,
		# GIF has no physical resolution field
		resolution_x=DEFAULT_DPI,
		resolution_y=DEFAULT_DPI,
		color_depth=table_bits if has_global_table else color_resolution,
		compression="LZW",
		format="GIF",
	)
