"""
Print orchestration: preset -> printer -> optional rendering -> submission.
"""

import logging
from typing import Iterable

from printdispatch.document import Document
from printdispatch.errors import (
    PresetNotFoundError,
    PrinterNotFoundError,
    PrintProtocolError,
    TemplateError,
)
from printdispatch.generator import DocumentGenerator
from printdispatch.presets import Preset, PresetRegistry
from printdispatch.printers import PrinterBase, PrinterRegistry

logger = logging.getLogger(__name__)


class PrinterContext:
    """Read-only view of the configured presets and printers."""

    def __init__(self, presets: PresetRegistry, printers: PrinterRegistry):
        self.presets = presets
        self.printers = printers

    def get_preset(self, name: str) -> Preset:
        preset = self.presets.get(name)
        if preset is None:
            raise PresetNotFoundError(name)
        return preset

    def get_printer(self, printer_id: str) -> PrinterBase:
        printer = self.printers.get(printer_id)
        if printer is None:
            raise PrinterNotFoundError(printer_id)
        return printer


class PrintOrchestrator:
    """
    Prints documents according to named presets.

    Documents are rendered through the preset's template when it has one,
    otherwise they reach the printer untouched.
    """

    def __init__(self, context: PrinterContext, generator: DocumentGenerator = None):
        self.context = context
        self.generator = generator or DocumentGenerator()

    async def print_document(self, document: Document, preset_name: str) -> int:
        """
        Print a single document.

        Returns:
            Job ID assigned by the printer

        Raises:
            NotFoundError: unknown preset or printer
            TemplateError: rendering failed
            PrintProtocolError: the printer did not accept the job
        """
        preset = self.context.get_preset(preset_name)
        printer = self.context.get_printer(preset.printer)

        if preset.templated:
            try:
                document = await self.generator.generate(document, preset)
            except TemplateError:
                raise
            except Exception as e:
                raise TemplateError("failed to generate document") from e

        logger.debug(f"Print file {document.name} on printer {printer.name} with preset {preset_name}.")

        try:
            job_id = await printer.submit(document, preset.job_attributes)
        except Exception as e:
            raise PrintProtocolError("IPP error", {"printer": printer.printer_id}) from e

        return job_id

    async def print_documents(self, entries: Iterable[tuple[Document, str]]) -> list[int]:
        """
        Print documents one after another, in order.

        Stops at the first failure and raises it; job IDs are only returned
        when every document was printed. This is the batch entry point for
        documents already in hand; the HTTP batch handler interleaves
        downloads with print_document so later URLs are never fetched.
        """
        job_ids = []
        for document, preset_name in entries:
            job_ids.append(await self.print_document(document, preset_name))
        return job_ids
