from __future__ import annotations

import pytest

from api.services.byte_reader import BIG, LITTLE, ByteReader
from api.services.errors import OutOfRangeError


DATA = bytes([0x01, 0x02, 0x03, 0x04, 0xFF, 0xFE])


def test_reads_respect_default_and_per_call_byte_order() -> None:
	le = ByteReader(DATA, LITTLE)
	assert le.u16(0) == 0x0201
	assert le.u32(0) == 0x04030201
	assert le.u16(0, BIG) == 0x0102
	assert ByteReader(DATA, BIG).u32(0) == 0x01020304


def test_signed_reads() -> None:
	r = ByteReader(DATA, LITTLE)
	assert r.i8(4) == -1
	assert r.u8(4) == 0xFF
	assert r.i16(4) == -257
	assert ByteReader(b"\xff\xff\xff\xff").i32(0) == -1


def test_ascii_and_raw_ranges() -> None:
	r = ByteReader(b"GIF89a\x00")
	assert r.ascii(0, 6) == "GIF89a"
	assert r.raw(3, 6) == b"89a"
	assert r.ascii(2, 2) == ""


@pytest.mark.parametrize(
	"call",
	[
		lambda r: r.u8(6),
		lambda r: r.u16(5),
		lambda r: r.u32(3),
		lambda r: r.i32(-1),
		lambda r: r.ascii(4, 8),
		lambda r: r.raw(5, 4),
	],
)
def test_out_of_range_reads_raise(call) -> None:
	with pytest.raises(OutOfRangeError):
		call(ByteReader(DATA))


def test_with_byte_order_shares_buffer() -> None:
	r = ByteReader(DATA, LITTLE).with_byte_order(BIG)
	assert r.byte_order == BIG
	assert r.u16(0) == 0x0102
	assert len(r) == len(DATA)


def test_rejects_unknown_byte_order() -> None:
	with pytest.raises(ValueError):
		ByteReader(DATA, "!")
