"""Tests for printer adapters."""

import pytest

from printdispatch.document import Document
from printdispatch.printers import PrinterRegistry, PrinterStatus
from printdispatch.printers.mock import MockPrinter


class TestMockPrinter:
    @pytest.mark.asyncio
    async def test_assigns_increasing_job_ids(self):
        printer = MockPrinter("office", "Office", {"first_job_id": 7})

        first = await printer.submit(Document.from_bytes("a", b"1"), {})
        second = await printer.submit(Document.from_bytes("b", b"2"), {})

        assert (first, second) == (7, 8)

    @pytest.mark.asyncio
    async def test_job_history_is_bounded(self):
        printer = MockPrinter()

        for i in range(60):
            await printer.submit(Document.from_bytes(f"doc-{i}", b"x"), {})

        assert len(printer.jobs) == 50
        assert printer.jobs[0].name == "doc-10"
        assert printer.jobs[-1].job_id == 60

    @pytest.mark.asyncio
    async def test_not_ready_rejects_jobs(self):
        printer = MockPrinter()
        printer.set_status(PrinterStatus.OFFLINE)

        with pytest.raises(RuntimeError, match="not ready"):
            await printer.submit(Document.from_bytes("a", b"1"), {})


class TestPrinterRegistry:
    @pytest.mark.asyncio
    async def test_status_of_all_printers(self):
        registry = PrinterRegistry()
        registry.register(MockPrinter("a"))
        offline = MockPrinter("b")
        offline.set_status(PrinterStatus.OFFLINE)
        registry.register(offline)

        assert registry.ids() == ["a", "b"]
        assert await registry.get_all_status() == {"a": PrinterStatus.READY, "b": PrinterStatus.OFFLINE}
        assert registry.get("missing") is None
