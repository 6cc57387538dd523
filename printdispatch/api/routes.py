"""
API routes for print dispatch.

Documents are referenced by URL; the server downloads them with the
caller's forwarded cookies and prints them according to a named preset.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import AliasChoices, BaseModel, Field

from printdispatch.api.dependencies import get_context, get_fetcher, get_orchestrator
from printdispatch.errors import DownloadError, ErrorKind, PrintDispatchError
from printdispatch.fetcher import FORWARDED_COOKIE_HEADER, Fetcher
from printdispatch.orchestrator import PrinterContext, PrintOrchestrator
from printdispatch.printers import PrinterStatus

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time
_server_start_time = datetime.now()


class UrlDocument(BaseModel):
    url: str = Field(validation_alias=AliasChoices("url", "Url"))
    preset: str = Field(validation_alias=AliasChoices("preset", "Preset"))


class UrlsPrintRequest(BaseModel):
    documents: list[UrlDocument] = Field(
        default_factory=list,
        validation_alias=AliasChoices("Documents", "documents")
    )


def error_status(error: PrintDispatchError) -> int:
    """HTTP status for a pipeline error: 400 for bad requests, 500 otherwise."""
    return 400 if error.kind == ErrorKind.BAD_REQUEST else 500


def _is_online(status: PrinterStatus) -> bool:
    return status in (PrinterStatus.READY, PrinterStatus.BUSY)


@router.get("/health")
async def health_check(
    detailed: bool = Query(default=False),
    context: PrinterContext = Depends(get_context)
):
    """
    Health check endpoint.

    Args:
        detailed: If true, include printer status and configured presets
    """
    if not detailed:
        return {"status": "ok"}

    statuses = await context.printers.get_all_status()
    printers_ok = all(_is_online(status) for status in statuses.values())
    uptime_seconds = (datetime.now() - _server_start_time).total_seconds()

    return {
        "status": "ok" if printers_ok else "degraded",
        "uptime_seconds": int(uptime_seconds),
        "printers": {
            pid: {
                "status": status.value,
                "online": _is_online(status)
            }
            for pid, status in statuses.items()
        },
        "presets_configured": len(context.presets)
    }


@router.get("/status")
async def get_status(context: PrinterContext = Depends(get_context)):
    """Get status of all printers."""
    statuses = await context.printers.get_all_status()

    return {
        "printers": {
            printer_id: {
                "name": context.printers.get(printer_id).name,
                "status": status.value,
                "online": _is_online(status)
            }
            for printer_id, status in statuses.items()
        }
    }


@router.get("/presets")
async def list_presets(context: PrinterContext = Depends(get_context)):
    """List all configured presets."""
    return {
        "presets": context.presets.list_presets()
    }


@router.post("/print/url")
async def print_url(
    request: UrlDocument,
    cookies: str = Header(default="", alias=FORWARDED_COOKIE_HEADER),
    fetcher: Fetcher = Depends(get_fetcher),
    orchestrator: PrintOrchestrator = Depends(get_orchestrator)
):
    """
    Download a document and print it with a preset.

    Body: {"url": "...", "preset": "..."}
    Returns {"JobID": <int>}.
    """
    try:
        document = await fetcher.download_document(request.url, cookies)
    except DownloadError as e:
        logger.error(f"[print/url] {e}")
        raise HTTPException(status_code=error_status(e), detail="could not download file")

    try:
        job_id = await orchestrator.print_document(document, request.preset)
    except PrintDispatchError as e:
        logger.error(f"[print/url] {e}")
        raise HTTPException(status_code=error_status(e), detail=f"print error: {e}")
    finally:
        document.body.close()

    return {"JobID": job_id}


@router.post("/print/urls")
async def print_urls(
    request: UrlsPrintRequest,
    cookies: str = Header(default="", alias=FORWARDED_COOKIE_HEADER),
    fetcher: Fetcher = Depends(get_fetcher),
    orchestrator: PrintOrchestrator = Depends(get_orchestrator)
):
    """
    Download and print several documents, in order.

    Body: {"Documents": [{"url": "...", "preset": "..."}, ...]}
    Returns {"JobIDs": [<int>, ...]} only if every document was printed;
    the first failure aborts the remaining documents.
    """
    job_ids = []
    for entry in request.documents:
        try:
            document = await fetcher.download_document(entry.url, cookies)
        except DownloadError as e:
            logger.error(f"[print/urls] download failed for {entry.url}: {e}")
            raise HTTPException(status_code=error_status(e), detail=f"could not download file: {entry.url}")

        try:
            job_ids.append(await orchestrator.print_document(document, entry.preset))
        except PrintDispatchError as e:
            logger.error(f"[print/urls] print failed for {entry.url}: {e}")
            raise HTTPException(status_code=error_status(e), detail=f"print error: {e}")
        finally:
            document.body.close()

    return {"JobIDs": job_ids}
