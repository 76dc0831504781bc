from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from api.services.byte_reader import BIG, LITTLE, ByteReader
from api.services.errors import InvalidSignatureError
from api.services.records import DEFAULT_DPI, MetadataRecord, per_cm_to_dpi, round_half_up


logger = logging.getLogger(__name__)

BYTE_ORDERS = {"II": LITTLE, "MM": BIG}
TIFF_MAGIC = 42
ENTRY_SIZE = 12

TAG_IMAGE_WIDTH = 256
TAG_IMAGE_LENGTH = 257
TAG_BITS_PER_SAMPLE = 258
TAG_COMPRESSION = 259
TAG_SAMPLES_PER_PIXEL = 277
TAG_X_RESOLUTION = 282
TAG_Y_RESOLUTION = 283
TAG_RESOLUTION_UNIT = 296

TYPE_SHORT = 3
TYPE_LONG = 4

UNIT_INCH = 2
UNIT_CENTIMETER = 3

# TIFF 6.0 section 8 plus the Adobe and PKZIP deflate codes
COMPRESSION_TYPES = {
	1: "None",
	2: "CCITT RLE",
	3: "CCITT Group 3",
	4: "CCITT Group 4",
	5: "LZW",
	6: "JPEG (old)",
	7: "JPEG",
	8: "Deflate",
	32773: "PackBits",
	32946: "Deflate",
}


@dataclass
class IfdEntry:
	tag: int
	type: int
	count: int
	value_offset: int  # absolute offset of the 4-byte value field


def _entry_at(r: ByteReader, offset: int) -> IfdEntry:
	return IfdEntry(
		tag=r.u16(offset),
		type=r.u16(offset + 2),
		count=r.u32(offset + 4),
		value_offset=offset + 8,
	)


def _first_value(r: ByteReader, e: IfdEntry) -> int:
	"""
	First SHORT or LONG value of an entry. Values wider than the 4-byte field
	live at the offset stored in it.
	"""
	size = 4 if e.type == TYPE_LONG else 2
	pos = e.value_offset
	if size * e.count > 4:
		pos = r.u32(e.value_offset)
	return r.u32(pos) if size == 4 else r.u16(pos)


def _rational(r: ByteReader, e: IfdEntry) -> Optional[int]:
	pos = r.u32(e.value_offset)
	numerator = r.u32(pos)
	denominator = r.u32(pos + 4)
	if denominator == 0:
		logger.debug("tag %d: zero denominator, ignoring", e.tag)
		return None
	return round_half_up(numerator / denominator)


def decode_tiff(data: bytes, filename: str) -> MetadataRecord:
	r = ByteReader(data)
	byte_order = BYTE_ORDERS.get(r.ascii(0, 2))
	if byte_order is None:
		raise InvalidSignatureError("Not a valid TIFF file")
	r = r.with_byte_order(byte_order)
	if r.u16(2) != TIFF_MAGIC:
		raise InvalidSignatureError("Not a valid TIFF file")

	ifd_offset = r.u32(4)
	num_entries = r.u16(ifd_offset)
	logger.debug("%s: IFD at %d with %d entries", filename, ifd_offset, num_entries)

	width = 0
	height = 0
	bits_per_sample = 1
	samples_per_pixel = 1
	compression = 1
	res_x: Optional[int] = None
	res_y: Optional[int] = None
	resolution_unit = UNIT_INCH

	for i in range(num_entries):
		e = _entry_at(r, ifd_offset + 2 + i * ENTRY_SIZE)
		if e.tag == TAG_IMAGE_WIDTH:
			width = _first_value(r, e)
		elif e.tag == TAG_IMAGE_LENGTH:
			height = _first_value(r, e)
		elif e.tag == TAG_BITS_PER_SAMPLE:
			bits_per_sample = _first_value(r, e)
		elif e.tag == TAG_COMPRESSION:
			compression = _first_value(r, e)
		elif e.tag == TAG_SAMPLES_PER_PIXEL:
			samples_per_pixel = _first_value(r, e)
		elif e.tag == TAG_X_RESOLUTION:
			res_x = _rational(r, e)
		elif e.tag == TAG_Y_RESOLUTION:
			res_y = _rational(r, e)
		elif e.tag == TAG_RESOLUTION_UNIT:
			resolution_unit = _first_value(r, e)

	if resolution_unit == UNIT_CENTIMETER:
		if res_x is not None:
			res_x = per_cm_to_dpi(res_x)
		if res_y is not None:
			res_y = per_cm_to_dpi(res_y)

	return MetadataRecord(
		filename=filename,
		width=width,
		height=height,
		resolution_x=DEFAULT_DPI if res_x is None else res_x,
		resolution_y=DEFAULT_DPI if res_y is None else res_y,
		color_depth=bits_per_sample * samples_per_pixel,
		compression=COMPRESSION_TYPES.get(compression, f"Unknown ({compression})"),
		format="TIFF",
	)
