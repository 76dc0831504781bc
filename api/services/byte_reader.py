from __future__ import annotations

import struct
from typing import Optional

from api.services.errors import OutOfRangeError


LITTLE = "<"
BIG = ">"

# struct codes keyed by (bits, signed)
_CODES = {
	(8, False): "B",
	(8, True): "b",
	(16, False): "H",
	(16, True): "h",
	(32, False): "I",
	(32, True): "i",
}


class ByteReader:
	"""
	Bounds-checked reads over an in-memory buffer.
	Every accessor raises OutOfRangeError instead of returning short or wrapped data.
	Endianness defaults to the reader's byte order and may be overridden per call.
	"""

	def __init__(self, data: bytes, byte_order: str = LITTLE) -> None:
		if byte_order not in (LITTLE, BIG):
			raise ValueError(f"byte_order must be '<' or '>', got {byte_order!r}")
		self.data = data
		self.byte_order = byte_order

	def __len__(self) -> int:
		return len(self.data)

	def with_byte_order(self, byte_order: str) -> "ByteReader":
		return ByteReader(self.data, byte_order)

	def has(self, offset: int, size: int) -> bool:
		return offset >= 0 and size >= 0 and offset + size <= len(self.data)

	def _check(self, offset: int, size: int) -> None:
		if not self.has(offset, size):
			raise OutOfRangeError(
				f"Read of {size} byte(s) at offset {offset} exceeds buffer length {len(self.data)}"
			)

	def _unpack(self, offset: int, bits: int, signed: bool, byte_order: Optional[str]) -> int:
		size = bits // 8
		self._check(offset, size)
		fmt = (byte_order or self.byte_order) + _CODES[(bits, signed)]
		return struct.unpack_from(fmt, self.data, offset)[0]

	def u8(self, offset: int) -> int:
		return self._unpack(offset, 8, False, None)

	def i8(self, offset: int) -> int:
		return self._unpack(offset, 8, True, None)

	def u16(self, offset: int, byte_order: Optional[str] = None) -> int:
		return self._unpack(offset, 16, False, byte_order)

	def i16(self, offset: int, byte_order: Optional[str] = None) -> int:
		return self._unpack(offset, 16, True, byte_order)

	def u32(self, offset: int, byte_order: Optional[str] = None) -> int:
		return self._unpack(offset, 32, False, byte_order)

	def i32(self, offset: int, byte_order: Optional[str] = None) -> int:
		return self._unpack(offset, 32, True, byte_order)

	def raw(self, start: int, end: int) -> bytes:
		self._check(start, end - start)
		return self.data[start:end]

	def ascii(self, start: int, end: int) -> str:
		# latin-1 maps every byte, so non-ASCII signatures compare unequal rather than raise
		return self.raw(start, end).decode("latin-1")
