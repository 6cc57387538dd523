import asyncio
import itertools
import logging
from collections import deque
from dataclasses import dataclass

from printdispatch.document import Document
from .base import PrinterBase, PrinterStatus

logger = logging.getLogger(__name__)


@dataclass
class SubmittedJob:
    job_id: int
    name: str
    mime_type: str
    data: bytes
    job_attributes: dict


class MockPrinter(PrinterBase):
    """Mock printer for development and tests without hardware."""

    def __init__(self, printer_id: str = "mock", name: str = "Mock Printer", config: dict = None):
        super().__init__(printer_id, name, config or {})
        self._status = PrinterStatus.READY
        self._print_delay = config.get("print_delay", 0.0) if config else 0.0
        self._fail = config.get("fail", False) if config else False  # For testing error handling
        self._job_ids = itertools.count(config.get("first_job_id", 1) if config else 1)
        self.jobs: deque[SubmittedJob] = deque(maxlen=50)  # Keep last 50 submitted jobs

    async def get_status(self) -> PrinterStatus:
        return self._status

    def set_status(self, status: PrinterStatus) -> None:
        """Allow tests to set printer status."""
        self._status = status

    def set_fail(self, fail: bool) -> None:
        """Allow tests to make submissions fail."""
        self._fail = fail

    async def submit(self, document: Document, job_attributes: dict) -> int:
        if self._fail:
            raise RuntimeError("client-error-not-possible")
        if self._status != PrinterStatus.READY:
            raise RuntimeError(f"Printer not ready: {self._status.value}")

        data = document.read()

        # Simulate print time
        if self._print_delay:
            self._status = PrinterStatus.BUSY
            await asyncio.sleep(self._print_delay)
            self._status = PrinterStatus.READY

        job_id = next(self._job_ids)
        self.jobs.append(SubmittedJob(
            job_id=job_id,
            name=document.name,
            mime_type=document.mime_type,
            data=data,
            job_attributes=job_attributes,
        ))

        logger.info(f"[MOCK] Printed job {job_id} on {self.printer_id}: {document.name} ({len(data)} bytes)")
        return job_id
