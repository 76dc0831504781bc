from __future__ import annotations

import logging
import time
from typing import List, Optional, Tuple

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from api.config import Settings
from api.services.dispatcher import decode_batch, file_extension
from api.services.export import records_to_csv, records_to_json, sort_records
from api.services.records import MetadataRecord


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analyze"])


def _settings(request: Request) -> Settings:
	return request.app.state.settings


async def _analyze(files: Optional[List[UploadFile]], settings: Settings) -> List[MetadataRecord]:
	if not files:
		raise HTTPException(status_code=400, detail="No files provided")

	# oversized uploads are reported in place, everything else is decoded in one batch
	slots: List[Optional[MetadataRecord]] = []
	pending: List[Tuple[int, bytes, str]] = []
	for f in files:
		name = f.filename or "unnamed"
		data = await f.read(settings.max_upload_bytes + 1)
		if len(data) > settings.max_upload_bytes:
			slots.append(MetadataRecord.failure(
				name,
				file_extension(name).upper(),
				f"File exceeds maximum size of {settings.max_upload_bytes} bytes",
			))
			continue
		pending.append((len(slots), data, name))
		slots.append(None)

	try:
		decoded = await run_in_threadpool(
			decode_batch,
			[(data, name) for _, data, name in pending],
			settings.max_workers,
		)
	except Exception as e:  # pragma: no cover
		logger.exception("unexpected error while decoding uploads")
		raise HTTPException(status_code=500, detail="internal server error") from e
	for (index, _, _), record in zip(pending, decoded):
		slots[index] = record

	records = [r for r in slots if r is not None]
	failed = sum(1 for r in records if not r.ok)
	logger.info("analyzed %d file(s), %d failed", len(records), failed)
	return records


@router.post("/analyze-images", summary="Extract header metadata from uploaded images")
async def analyze_images(request: Request, files: Optional[List[UploadFile]] = File(None)):
	records = await _analyze(files, _settings(request))
	return records_to_json(records)


@router.post("/analyze-images/csv", summary="Extract header metadata and export it as CSV")
async def analyze_images_csv(
	request: Request,
	files: Optional[List[UploadFile]] = File(None),
	sort_by: str = Form("filename"),
	descending: bool = Form(False),
):
	records = await _analyze(files, _settings(request))
	try:
		records = sort_records(records, sort_by, descending=descending)
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e)) from e
	filename = f"image-metadata-{int(time.time() * 1000)}.csv"
	return Response(
		content=records_to_csv(records),
		media_type="text/csv; charset=utf-8",
		headers={"Content-Disposition": f'attachment; filename="{filename}"'},
	)
