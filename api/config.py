from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional


ENV_PREFIX = "IMAGE_INSPECTOR_"


def _env(name: str, default: str) -> str:
	return os.getenv(ENV_PREFIX + name, default)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
	raw = os.getenv(ENV_PREFIX + name)
	if raw is None or not raw.strip():
		return default
	try:
		return int(raw)
	except ValueError as exc:
		raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
	host: str = "0.0.0.0"
	port: int = 8000
	cors_origins: List[str] = field(default_factory=lambda: ["*"])
	max_upload_bytes: int = 50 * 1024 * 1024
	max_workers: Optional[int] = None
	log_level: str = "INFO"


def load_settings() -> Settings:
	origins = [o.strip() for o in _env("CORS_ORIGINS", "*").split(",") if o.strip()]
	return Settings(
		host=_env("HOST", "0.0.0.0"),
		port=_env_int("PORT", 8000),
		cors_origins=origins or ["*"],
		max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 50 * 1024 * 1024),
		max_workers=_env_int("MAX_WORKERS", None),
		log_level=_env("LOG_LEVEL", "INFO").upper(),
	)
