"""Bulk CSV/XLSX distance endpoints."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile, status

from ...schemas.bulk import BulkResponse, CancelResponse, ProgressModel
from ...services.bulk import BulkOutcome, BulkSession
from ...services.errors import BulkProcessingError, InvalidUploadError, NoValidRowsError, UnsupportedFileTypeError
from ...services.outputs.formatter import result_to_record, results_filename, results_to_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bulk", tags=["bulk"])


def get_bulk_session(request: Request) -> BulkSession:
    return request.app.state.bulk_session


async def _process(session: BulkSession, file: UploadFile, mode: str) -> BulkOutcome:
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filename is required.")
    payload = await file.read()
    try:
        return await session.process_upload(file.filename, payload, mode)
    except UnsupportedFileTypeError as exc:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc)) from exc
    except (InvalidUploadError, NoValidRowsError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BulkProcessingError as exc:
        logger.exception(f"Error processing upload '{file.filename}': {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc


@router.post("/upload", response_model=BulkResponse, status_code=status.HTTP_200_OK)
async def upload(
    file: UploadFile = File(...),
    mode: Literal["air", "road"] = Form("air"),
    session: BulkSession = Depends(get_bulk_session),
) -> BulkResponse:
    """Compute distances for every row of an uploaded file and return them as JSON."""
    outcome = await _process(session, file, mode)
    records = [result_to_record(resolved, outcome.mode) for resolved in outcome.results]
    return BulkResponse(
        status=outcome.status.value,
        mode=outcome.mode.value,
        total_rows=len(records),
        failed_rows=sum(1 for resolved in outcome.results if resolved.error),
        results=records,
        progress=ProgressModel(**session.progress.snapshot()),
    )


@router.post("/upload.csv", status_code=status.HTTP_200_OK)
async def upload_csv(
    file: UploadFile = File(...),
    mode: Literal["air", "road"] = Form("air"),
    session: BulkSession = Depends(get_bulk_session),
) -> Response:
    """Same as /upload, but answer with the results as a CSV download."""
    outcome = await _process(session, file, mode)
    if outcome.cancelled:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Processing was cancelled.")
    filename = results_filename(outcome.mode)
    return Response(
        content=results_to_csv(outcome.results, outcome.mode),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/progress", response_model=ProgressModel, status_code=status.HTTP_200_OK)
async def progress(session: BulkSession = Depends(get_bulk_session)) -> ProgressModel:
    return ProgressModel(**session.progress.snapshot())


@router.post("/cancel", response_model=CancelResponse, status_code=status.HTTP_200_OK)
async def cancel(session: BulkSession = Depends(get_bulk_session)) -> CancelResponse:
    cancelled = session.cancel()
    return CancelResponse(cancelled=cancelled, progress=ProgressModel(**session.progress.snapshot()))
