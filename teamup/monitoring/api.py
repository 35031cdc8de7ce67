import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from teamup.auth.dependencies import get_current_identity
from teamup.auth.schemas import Identity
from teamup.errors import InvalidPayload
from teamup.monitoring.schemas import ErrorLogEntry, ErrorLogsResponse, SaveLogsResponse
from teamup.monitoring.services import ErrorLogSink, get_error_sink

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/monitoring", tags=["monitoring"])


@router.post("/errors", response_model=SaveLogsResponse)
async def save_error_logs(request: Request, sink: ErrorLogSink = Depends(get_error_sink)):
    try:
        body = await request.json()
    except ValueError:
        # JSON invalide ou corps non UTF-8
        raise InvalidPayload("Invalid logs format")

    logs = body.get("logs") if isinstance(body, dict) else None
    if not isinstance(logs, list):
        raise InvalidPayload("Invalid logs format")

    try:
        entries = [ErrorLogEntry.model_validate(item).model_dump(exclude_none=True) for item in logs]
    except ValidationError as e:
        logger.warning(f"⚠️ Logs client mal formés : {e}")
        raise InvalidPayload("Invalid logs format")

    saved = await run_in_threadpool(sink.append, entries)
    return SaveLogsResponse(saved=saved)


@router.get("/errors", response_model=ErrorLogsResponse)
async def read_error_logs(
    day: Optional[date] = Query(None, alias="date", description="Jour au format YYYY-MM-DD"),
    identity: Identity = Depends(get_current_identity),
    sink: ErrorLogSink = Depends(get_error_sink),
):
    day = day or datetime.now(timezone.utc).date()
    logs = await run_in_threadpool(sink.read, day)
    return ErrorLogsResponse(date=day.isoformat(), logs=logs)
