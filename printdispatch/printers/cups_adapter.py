"""
CUPS printer adapter.

Requires: pycups package
Works with any CUPS-configured printer (network or local). Jobs are
submitted over IPP by the CUPS client library.
"""

import asyncio
import logging
import mimetypes
import os
import shutil
import tempfile

from printdispatch.document import Document, PDF_EXTENSION
from .base import PrinterBase, PrinterStatus

logger = logging.getLogger(__name__)

try:
    import cups
    CUPS_AVAILABLE = True
except ImportError:
    CUPS_AVAILABLE = False
    logger.warning("pycups package not available - CUPSAdapter will not function")


def cups_options(job_attributes: dict) -> dict[str, str]:
    """
    Convert preset job attributes into the string options CUPS expects.

    Lists become comma separated values, booleans become true/false.
    """
    options = {}
    for key, value in job_attributes.items():
        if isinstance(value, bool):
            options[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            options[key] = ",".join(str(v) for v in value)
        else:
            options[key] = str(value)
    return options


class CUPSAdapter(PrinterBase):
    """
    Adapter for CUPS-managed printers.

    Config options:
        cups_name: CUPS printer name (as shown in `lpstat -p`)
        cups_server: CUPS server address (default: localhost)
    """

    def __init__(self, printer_id: str, name: str, config: dict):
        super().__init__(printer_id, name, config)
        self.cups_name = config.get("cups_name", "")
        self.cups_server = config.get("cups_server", "localhost")
        self._conn = None

    def _get_connection(self):
        """Get or create CUPS connection."""
        if not CUPS_AVAILABLE:
            return None
        if self._conn is None:
            if self.cups_server != "localhost":
                cups.setServer(self.cups_server)
            self._conn = cups.Connection()
        return self._conn

    async def get_status(self) -> PrinterStatus:
        if not CUPS_AVAILABLE:
            return PrinterStatus.ERROR
        if not self.cups_name:
            return PrinterStatus.OFFLINE

        try:
            conn = self._get_connection()
            printers = conn.getPrinters()

            if self.cups_name not in printers:
                return PrinterStatus.OFFLINE

            printer_info = printers[self.cups_name]
            state = printer_info.get("printer-state", 0)

            # CUPS states: 3=idle, 4=printing, 5=stopped
            if state == 3:
                return PrinterStatus.READY
            elif state == 4:
                return PrinterStatus.BUSY
            else:
                return PrinterStatus.OFFLINE

        except Exception as e:
            logger.error(f"Failed to get CUPS status: {e}")
            return PrinterStatus.ERROR

    async def submit(self, document: Document, job_attributes: dict) -> int:
        if not CUPS_AVAILABLE:
            raise RuntimeError("pycups package not installed")
        if not self.cups_name:
            raise RuntimeError(f"No CUPS printer configured for {self.printer_id}")

        conn = self._get_connection()
        suffix = mimetypes.guess_extension(document.mime_type) or PDF_EXTENSION

        # CUPS requires a file path, so we write to temp file
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as f:
            shutil.copyfileobj(document.body, f)
            temp_path = f.name

        try:
            loop = asyncio.get_running_loop()
            cups_job_id = await loop.run_in_executor(
                None,
                conn.printFile,
                self.cups_name,
                temp_path,
                document.name or "document",
                cups_options(job_attributes),
            )
        finally:
            # Clean up temp file
            os.unlink(temp_path)

        logger.info(f"Submitted {document.name} to CUPS printer {self.cups_name} as job {cups_job_id}")
        return cups_job_id
