from __future__ import annotations

import struct

import pytest

from api.services.decoders.tiff import decode_tiff
from api.services.errors import InvalidSignatureError, OutOfRangeError
from headers import extra_offset, tiff_header, tiff_long, tiff_rational, tiff_short


SHORT = 3
LONG = 4
RATIONAL = 5


def _basic_entries(bo: str, width_type: int = LONG):
	width_value = tiff_long(640, bo) if width_type == LONG else tiff_short(640, bo)
	return [
		(256, width_type, 1, width_value),
		(257, SHORT, 1, tiff_short(480, bo)),
		(258, SHORT, 1, tiff_short(8, bo)),
		(259, SHORT, 1, tiff_short(1, bo)),
		(277, SHORT, 1, tiff_short(1, bo)),
	]


@pytest.mark.parametrize("bo", ["II", "MM"])
def test_minimal_header_both_byte_orders(bo: str) -> None:
	rec = decode_tiff(tiff_header(_basic_entries(bo), byte_order=bo), "a.tif")
	assert (rec.width, rec.height) == (640, 480)
	assert rec.color_depth == 8
	assert rec.compression == "None"
	assert (rec.resolution_x, rec.resolution_y) == (72, 72)
	assert rec.format == "TIFF"


def test_big_endian_short_width() -> None:
	rec = decode_tiff(tiff_header(_basic_entries("MM", width_type=SHORT), byte_order="MM"), "a.tif")
	assert rec.width == 640


def test_big_endian_centimeter_resolution() -> None:
	bo = "MM"
	n = 4
	base = extra_offset(n)
	entries = [
		(256, LONG, 1, tiff_long(10, bo)),
		(282, RATIONAL, 1, tiff_long(base, bo)),
		(283, RATIONAL, 1, tiff_long(base + 8, bo)),
		(296, SHORT, 1, tiff_short(3, bo)),
	]
	extra = tiff_rational(100, 1, bo) + tiff_rational(40, 1, bo)
	rec = decode_tiff(tiff_header(entries, byte_order=bo, extra=extra), "a.tif")
	assert rec.resolution_x == 254
	assert rec.resolution_y == 102


def test_inch_resolution_rounds_rational() -> None:
	bo = "II"
	base = extra_offset(2)
	entries = [
		(282, RATIONAL, 1, tiff_long(base, bo)),
		(283, RATIONAL, 1, tiff_long(base + 8, bo)),
	]
	extra = tiff_rational(600, 2, bo) + tiff_rational(1001, 10, bo)
	rec = decode_tiff(tiff_header(entries, extra=extra), "a.tif")
	assert (rec.resolution_x, rec.resolution_y) == (300, 100)


def test_unit_without_resolution_tags_keeps_default() -> None:
	rec = decode_tiff(tiff_header([(296, SHORT, 1, tiff_short(3))]), "a.tif")
	assert (rec.resolution_x, rec.resolution_y) == (72, 72)


def test_zero_denominator_keeps_default() -> None:
	base = extra_offset(1)
	rec = decode_tiff(tiff_header([(282, RATIONAL, 1, tiff_long(base))], extra=tiff_rational(300, 0)), "a.tif")
	assert rec.resolution_x == 72


def test_rgb_bits_per_sample_array() -> None:
	base = extra_offset(2)
	entries = [
		(258, SHORT, 3, tiff_long(base)),
		(277, SHORT, 1, tiff_short(3)),
	]
	extra = struct.pack("<HHH", 8, 8, 8)
	rec = decode_tiff(tiff_header(entries, extra=extra), "rgb.tif")
	assert rec.color_depth == 24


@pytest.mark.parametrize(
	"code,label",
	[(1, "None"), (2, "CCITT RLE"), (3, "CCITT Group 3"), (4, "CCITT Group 4"), (5, "LZW"), (6, "JPEG (old)"), (7, "JPEG"), (8, "Deflate"), (32773, "PackBits"), (32946, "Deflate"), (50000, "Unknown (50000)")],
)
def test_compression_labels(code: int, label: str) -> None:
	rec = decode_tiff(tiff_header([(259, SHORT, 1, tiff_short(code))]), "a.tif")
	assert rec.compression == label


def test_unknown_tags_are_skipped() -> None:
	entries = [(305, 2, 4, b"abc\x00"), (256, LONG, 1, tiff_long(9))]
	assert decode_tiff(tiff_header(entries), "a.tif").width == 9


@pytest.mark.parametrize("head", [b"IM*\x00", b"XX*\x00"])
def test_bad_byte_order(head: bytes) -> None:
	with pytest.raises(InvalidSignatureError):
		decode_tiff(head + tiff_header([])[4:], "a.tif")


def test_bad_magic() -> None:
	data = b"II" + struct.pack("<HI", 43, 8) + b"\x00\x00"
	with pytest.raises(InvalidSignatureError):
		decode_tiff(data, "a.tif")


def test_wrong_endian_magic() -> None:
	# 42 stored little-endian behind a big-endian marker
	data = b"MM" + struct.pack("<HI", 42, 8) + b"\x00\x00"
	with pytest.raises(InvalidSignatureError):
		decode_tiff(data, "a.tif")


def test_ifd_offset_past_end() -> None:
	data = b"II" + struct.pack("<HI", 42, 4096)
	with pytest.raises(OutOfRangeError):
		decode_tiff(data, "a.tif")


def test_truncated_entries() -> None:
	data = tiff_header(_basic_entries("II"))[:40]
	with pytest.raises(OutOfRangeError):
		decode_tiff(data, "a.tif")
