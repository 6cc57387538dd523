"""
Print payloads passed between the fetcher, the generator and the printers.
"""

from dataclasses import dataclass, field
from io import BytesIO
from typing import BinaryIO

APPLICATION_PDF = "application/pdf"
PDF_EXTENSION = ".pdf"

# Logical name given to every document downloaded from a URL
URL_DOCUMENT_NAME = "CloudPrintDocument"


@dataclass
class Document:
    name: str = ""
    mime_type: str = APPLICATION_PDF
    size: int = 0
    body: BinaryIO = field(default_factory=BytesIO)

    def __post_init__(self):
        if not self.mime_type:
            self.mime_type = APPLICATION_PDF

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str = APPLICATION_PDF) -> "Document":
        """Build a document backed by an in-memory buffer."""
        return cls(name=name, mime_type=mime_type, size=len(data), body=BytesIO(data))

    def read(self) -> bytes:
        """Read the remaining body bytes."""
        return self.body.read()
