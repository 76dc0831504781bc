from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from api.services.dispatcher import SUPPORTED_EXTENSIONS, decode_batch, file_extension
from api.services.export import records_to_frame, records_to_json, sort_records, write_records_csv, write_records_json
from api.services.records import MetadataRecord


logger = logging.getLogger(__name__)


def list_image_files(folder: Path, recursive: bool = False) -> List[Path]:
	candidates = folder.rglob("*") if recursive else folder.iterdir()
	return sorted(p for p in candidates if p.is_file() and p.suffix.lower().lstrip(".") in SUPPORTED_EXTENSIONS)


def collect_paths(inputs: Sequence[str], recursive: bool = False) -> List[Path]:
	# explicit files are kept whatever their extension so they show up as unsupported
	out: List[Path] = []
	for raw in inputs:
		p = Path(raw)
		if p.is_dir():
			out.extend(list_image_files(p, recursive=recursive))
		elif p.is_file():
			out.append(p)
		else:
			logger.warning("skipping missing path: %s", p)
	return out


def decode_paths(paths: Sequence[Path], max_workers: Optional[int] = None) -> List[MetadataRecord]:
	"""Read and decode each path, keeping input order; unreadable files become error records."""
	records: List[Optional[MetadataRecord]] = [None] * len(paths)
	items = []
	slots = []
	for i, p in enumerate(paths):
		# filenames stay relative to what the user typed
		name = str(p)
		try:
			data = p.read_bytes()
		except OSError as e:
			logger.warning("cannot read %s: %s", name, e)
			records[i] = MetadataRecord.failure(name, file_extension(name).upper(), str(e))
			continue
		items.append((data, name))
		slots.append(i)
	for i, rec in zip(slots, decode_batch(items, max_workers=max_workers)):
		records[i] = rec
	return [r for r in records if r is not None]


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="Inspect raster image headers (BMP, PNG, JPEG, GIF, TIFF, PCX)")
	parser.add_argument("paths", nargs="+", help="Image files or folders to inspect")
	parser.add_argument("--recursive", action="store_true", help="Descend into sub-folders")
	parser.add_argument("--csv", dest="csv_path", help="Also write results to this CSV file")
	parser.add_argument("--json-out", dest="json_path", help="Also write results to this JSON file")
	parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
	parser.add_argument("--sort-by", default="filename", help="Record field to sort by (e.g. width, colorDepth)")
	parser.add_argument("--descending", action="store_true", help="Sort in descending order")
	parser.add_argument("--workers", type=int, default=None, help="Maximum decode workers")
	parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
	return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)
	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

	paths = collect_paths(args.paths, recursive=args.recursive)
	if not paths:
		print("No images found", file=sys.stderr)
		return 2

	records = decode_paths(paths, max_workers=args.workers)
	try:
		records = sort_records(records, args.sort_by, descending=args.descending)
	except ValueError as e:
		parser.error(str(e))

	if args.json:
		print(json.dumps(records_to_json(records), indent=2))
	else:
		print(records_to_frame(records).to_string(index=False))

	if args.csv_path:
		out = write_records_csv(records, Path(args.csv_path))
		print(f"Saved: {out}", file=sys.stderr)

	if args.json_path:
		out = write_records_json(records, Path(args.json_path))
		print(f"Saved: {out}", file=sys.stderr)

	return 1 if any(not r.ok for r in records) else 0


if __name__ == "__main__":
	sys.exit(main())
