from .base import PrinterBase, PrinterStatus
from .registry import PrinterRegistry

__all__ = ["PrinterBase", "PrinterStatus", "PrinterRegistry"]
