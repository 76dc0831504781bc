from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd

from api.services.records import FIELD_NAMES, MetadataRecord


CSV_COLUMNS = [
	"Filename",
	"Width (px)",
	"Height (px)",
	"Resolution X (DPI)",
	"Resolution Y (DPI)",
	"Color Depth (bits)",
	"Compression",
	"Format",
	"Status",
]

# wire name -> record attribute
_SORT_FIELDS = {wire: attr for attr, wire in FIELD_NAMES.items()}


def _sort_key(value: Any) -> Any:
	return value.casefold() if isinstance(value, str) else value


def sort_records(records: Sequence[MetadataRecord], field: str = "filename", descending: bool = False) -> List[MetadataRecord]:
	"""
	Stable sort by a record field, accepting either wire names (resolutionX) or
	attribute names (resolution_x). Records without a value for the field go last.
	"""
	attr = _SORT_FIELDS.get(field, field)
	if attr not in FIELD_NAMES:
		raise ValueError(f"Unknown sort field: {field}")
	present = [r for r in records if getattr(r, attr) is not None]
	missing = [r for r in records if getattr(r, attr) is None]
	present = sorted(present, key=lambda r: _sort_key(getattr(r, attr)), reverse=descending)
	return present + missing


def records_to_frame(records: Sequence[MetadataRecord]) -> pd.DataFrame:
	rows = [
		[
			r.filename,
			r.width,
			r.height,
			r.resolution_x,
			r.resolution_y,
			r.color_depth,
			r.compression,
			r.format,
			"OK" if r.ok else f"Error: {r.error}",
		]
		for r in records
	]
	return pd.DataFrame(rows, columns=CSV_COLUMNS)


def records_to_csv(records: Sequence[MetadataRecord]) -> str:
	return records_to_frame(records).to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def write_records_csv(records: Sequence[MetadataRecord], out_path: Path) -> str:
	out_path.parent.mkdir(parents=True, exist_ok=True)
	with out_path.open("w", encoding="utf-8", newline="") as f:
		f.write(records_to_csv(records))
	return str(out_path)


def records_to_json(records: Sequence[MetadataRecord]) -> Dict[str, Any]:
	return {"results": [r.to_dict() for r in records]}


def write_records_json(records: Sequence[MetadataRecord], out_path: Path) -> str:
	out_path.parent.mkdir(parents=True, exist_ok=True)
	with out_path.open("w", encoding="utf-8") as f:
		json.dump(records_to_json(records), f, indent=2)
	return str(out_path)
