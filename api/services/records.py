from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional


DEFAULT_DPI = 72
METERS_PER_INCH = 0.0254
CM_PER_INCH = 2.54

# record attribute -> wire name
FIELD_NAMES: Dict[str, str] = {
	"filename": "filename",
	"width": "width",
	"height": "height",
	"resolution_x": "resolutionX",
	"resolution_y": "resolutionY",
	"color_depth": "colorDepth",
	"compression": "compression",
	"format": "format",
	"error": "error",
}


@dataclass(frozen=True)
class MetadataRecord:
	filename: str
	width: int
	height: int
	resolution_x: int
	resolution_y: int
	color_depth: int
	compression: str
	format: str
	error: Optional[str] = None

	@property
	def ok(self) -> bool:
		return self.error is None

	@classmethod
	def failure(cls, filename: str, format: str, message: str) -> "MetadataRecord":
		return cls(
			filename=filename,
			width=0,
			height=0,
			resolution_x=0,
			resolution_y=0,
			color_depth=0,
			compression="N/A",
			format=format,
			error=message or "Unknown error",
		)

	def to_dict(self) -> Dict[str, Any]:
		out = {wire: getattr(self, attr) for attr, wire in FIELD_NAMES.items()}
		if self.error is None:
			del out["error"]
		return out


def round_half_up(value: float) -> int:
	# half-up, not round-half-to-even
	return int(math.floor(value + 0.5))


def ppm_to_dpi(pixels_per_meter: float) -> int:
	return round_half_up(pixels_per_meter * METERS_PER_INCH)


def per_cm_to_dpi(dots_per_cm: float) -> int:
	return round_half_up(dots_per_cm * CM_PER_INCH)
