"""
Error hierarchy for the print pipeline.

Every error carries a fixed ErrorKind so the HTTP layer can pick a status
code and message without inspecting error strings.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    DOWNLOAD = "download"
    TEMPLATE = "template"
    PRINT_PROTOCOL = "print_protocol"


class PrintDispatchError(Exception):
    """Base class for all pipeline errors."""

    kind: ErrorKind = ErrorKind.PRINT_PROTOCOL

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        if self.__cause__ is not None:
            base = f"{base}: {self.__cause__}"
        return base


class BadRequestError(PrintDispatchError):
    kind = ErrorKind.BAD_REQUEST


class NotFoundError(PrintDispatchError):
    kind = ErrorKind.NOT_FOUND


class PresetNotFoundError(NotFoundError):
    def __init__(self, preset_name: str):
        super().__init__(f"preset not found: {preset_name}", {"preset": preset_name})
        self.preset_name = preset_name


class PrinterNotFoundError(NotFoundError):
    def __init__(self, printer_id: str):
        super().__init__(f"printer not found: {printer_id}", {"printer": printer_id})
        self.printer_id = printer_id


class DownloadError(PrintDispatchError):
    kind = ErrorKind.DOWNLOAD

    def __init__(self, message: str, url: str = ""):
        super().__init__(message, {"url": url} if url else None)
        self.url = url


class TemplateError(PrintDispatchError):
    """Mime resolution, temp file I/O, value injection or compilation failed."""

    kind = ErrorKind.TEMPLATE


class PrintProtocolError(PrintDispatchError):
    """The printer rejected or failed the job submission."""

    kind = ErrorKind.PRINT_PROTOCOL
