from __future__ import annotations

import logging
import struct
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from api.services.decoders.bmp import decode_bmp
from api.services.decoders.gif import decode_gif
from api.services.decoders.jpeg import decode_jpeg
from api.services.decoders.pcx import decode_pcx
from api.services.decoders.png import decode_png
from api.services.decoders.tiff import decode_tiff
from api.services.errors import DecodeError, UnsupportedFormatError
from api.services.records import MetadataRecord


logger = logging.getLogger(__name__)

Decoder = Callable[[bytes, str], MetadataRecord]

DECODERS: Dict[str, Decoder] = {
	"bmp": decode_bmp,
	"png": decode_png,
	"jpg": decode_jpeg,
	"jpeg": decode_jpeg,
	"gif": decode_gif,
	"tif": decode_tiff,
	"tiff": decode_tiff,
	"pcx": decode_pcx,
}

SUPPORTED_EXTENSIONS = frozenset(DECODERS)


def file_extension(filename: str) -> str:
	# text after the last dot; a name without a dot is its own "extension"
	return filename.lower().rsplit(".", 1)[-1]


def decode_image(data: bytes, filename: str) -> MetadataRecord:
	"""
	Decode one file's header. Never raises: every failure becomes an error record
	whose format is the uppercased extension.
	"""
	ext = file_extension(filename)
	try:
		decoder = DECODERS.get(ext)
		if decoder is None:
			raise UnsupportedFormatError(f"Unsupported format: {ext}")
		return decoder(data, filename)
	except DecodeError as e:
		logger.info("decode failed for %s (%s): %s", filename, e.kind, e)
		return MetadataRecord.failure(filename, ext.upper(), str(e))
	except (struct.error, ValueError, IndexError) as e:
		logger.warning("unexpected decode error for %s: %s", filename, e)
		return MetadataRecord.failure(filename, ext.upper(), str(e))


def decode_batch(items: Iterable[Tuple[bytes, str]], max_workers: Optional[int] = None) -> List[MetadataRecord]:
	"""
	Decode (data, filename) pairs concurrently. Output order matches input order.
	"""
	pairs = list(items)
	if not pairs:
		return []
	with ThreadPoolExecutor(max_workers=max_workers) as pool:
		futures = [pool.submit(decode_image, data, name) for data, name in pairs]
		return [f.result() for f in futures]
