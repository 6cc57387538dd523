from abc import ABC, abstractmethod
from enum import Enum

from printdispatch.document import Document


class PrinterStatus(Enum):
    READY = "ready"
    BUSY = "busy"
    OFFLINE = "offline"
    ERROR = "error"


class PrinterBase(ABC):
    """Abstract base class for all printer adapters."""

    def __init__(self, printer_id: str, name: str, config: dict):
        self.printer_id = printer_id
        self.name = name
        self.config = config

    @abstractmethod
    async def get_status(self) -> PrinterStatus:
        """Check if printer is ready."""
        pass

    @abstractmethod
    async def submit(self, document: Document, job_attributes: dict) -> int:
        """
        Submit a document as a print job.

        job_attributes are print-protocol attributes taken verbatim from the
        preset. Returns the job ID assigned by the printer; raises on failure.
        """
        pass
