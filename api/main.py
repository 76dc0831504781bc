from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.config import Settings, load_settings
from api.routers.analyze_images import router as analyze_router


def configure_logging(level: str) -> None:
	logging.basicConfig(
		level=getattr(logging, level, logging.INFO),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	settings = settings or load_settings()
	configure_logging(settings.log_level)
	app = FastAPI(title="Image Header Inspector", version="0.1.0")
	app.state.settings = settings

	# CORS (restrict IMAGE_INSPECTOR_CORS_ORIGINS in production)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_credentials=False,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	@app.get("/healthz", summary="Liveness check")
	def healthz():
		return {"status": "ok"}

	# Routers
	app.include_router(analyze_router)

	return app


app = create_app()


def main() -> None:
	# Local dev server: uvicorn api.main:app --reload
	import uvicorn

	# logging is configured by create_app when uvicorn imports api.main:app
	settings = load_settings()
	uvicorn.run("api.main:app", host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
	main()
