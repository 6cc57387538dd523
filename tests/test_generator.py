"""Tests for Typst document generation."""

import os
import re

import pytest

from printdispatch.document import APPLICATION_PDF, Document
from printdispatch.errors import TemplateError
from printdispatch.generator import (
    DEFAULT_WORKING_DIRECTORY,
    DocumentGenerator,
    extension_for_mime_type,
    inject_values,
)
from printdispatch.presets import Preset, TemplateDefinition


class RecordingCompiler:
    """Fake compiler that embeds the referenced document in its output."""

    def __init__(self, output: bytes = None, error: Exception = None):
        self.output = output
        self.error = error
        self.calls = []
        self.seen_files = []

    def compile(self, source: str, working_directory: str, output_format: str = "pdf") -> bytes:
        self.calls.append((source, working_directory, output_format))
        if self.error:
            raise self.error

        path = re.search(r'#let document_path = "([^"]*)"', source).group(1)
        host_path = os.path.join(working_directory, path.lstrip("/"))
        with open(host_path, "rb") as f:
            data = f.read()
        self.seen_files.append((host_path, data))

        if self.output is not None:
            return self.output
        return b"%PDF-1.7 " + data


def templated_preset(working_directory: str = "", content: str = "#image(document_path)") -> Preset:
    return Preset(
        name="templated",
        printer="office",
        template=TemplateDefinition(content=content, working_directory=working_directory),
    )


class TestExtensionForMimeType:
    def test_empty_mime_type_defaults_to_pdf(self):
        assert extension_for_mime_type("") == ".pdf"

    def test_registered_mime_type(self):
        assert extension_for_mime_type("application/pdf") == ".pdf"
        assert extension_for_mime_type("image/png") == ".png"

    def test_parameters_are_ignored(self):
        assert extension_for_mime_type("image/png; charset=binary") == ".png"

    def test_unregistered_mime_type_defaults_to_pdf(self):
        assert extension_for_mime_type("application/x-print-dispatch-unknown") == ".pdf"

    def test_malformed_mime_type_is_error(self):
        with pytest.raises(TemplateError):
            extension_for_mime_type("not a mime type")


class TestInjectValues:
    def test_prepends_bindings(self):
        source = inject_values("= Title", {"document_name": "Report", "copies": 2})
        assert source == '#let document_name = "Report"\n#let copies = 2\n= Title'

    def test_escapes_strings(self):
        source = inject_values("", {"document_name": 'a "quoted" \\ name\n'})
        assert source == '#let document_name = "a \\"quoted\\" \\\\ name\\n"\n'

    def test_invalid_name(self):
        with pytest.raises(TemplateError):
            inject_values("", {"not valid": "x"})

    def test_unsupported_value(self):
        with pytest.raises(TemplateError):
            inject_values("", {"document_name": object()})


class TestDocumentGenerator:
    @pytest.mark.asyncio
    async def test_renders_pdf_with_same_name(self, tmp_path):
        compiler = RecordingCompiler()
        generator = DocumentGenerator(compiler)
        document = Document.from_bytes("Invoice 42", b"source bytes", mime_type="image/png")

        rendered = await generator.generate(document, templated_preset(str(tmp_path)))

        assert rendered.name == "Invoice 42"
        assert rendered.mime_type == APPLICATION_PDF
        data = rendered.read()
        assert data == b"%PDF-1.7 source bytes"
        assert rendered.size == len(data)

    @pytest.mark.asyncio
    async def test_injects_values_before_template(self, tmp_path):
        compiler = RecordingCompiler()
        generator = DocumentGenerator(compiler)
        document = Document.from_bytes("CloudPrintDocument", b"x")

        await generator.generate(document, templated_preset(str(tmp_path), content="BODY"))

        source, working_directory, output_format = compiler.calls[0]
        assert working_directory == str(tmp_path)
        assert output_format == "pdf"
        assert re.match(r'#let document_path = "/doc-[^"]+\.pdf"\n', source)
        assert '#let document_name = "CloudPrintDocument"\n' in source
        assert '#let printer_name = "office"\n' in source
        assert source.endswith("BODY")

    @pytest.mark.asyncio
    async def test_temp_file_uses_mime_extension(self, tmp_path):
        compiler = RecordingCompiler()
        generator = DocumentGenerator(compiler)
        document = Document.from_bytes("label", b"png", mime_type="image/png")

        await generator.generate(document, templated_preset(str(tmp_path)))

        host_path, data = compiler.seen_files[0]
        assert host_path.endswith(".png")
        assert os.path.basename(host_path).startswith("doc-")
        assert data == b"png"

    @pytest.mark.asyncio
    async def test_temp_file_removed_after_generation(self, tmp_path):
        generator = DocumentGenerator(RecordingCompiler())

        await generator.generate(Document.from_bytes("doc", b"x"), templated_preset(str(tmp_path)))

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_temp_file_removed_after_failure(self, tmp_path):
        generator = DocumentGenerator(RecordingCompiler(error=RuntimeError("syntax error")))

        with pytest.raises(TemplateError):
            await generator.generate(Document.from_bytes("doc", b"x"), templated_preset(str(tmp_path)))

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_default_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        compiler = RecordingCompiler()
        generator = DocumentGenerator(compiler)

        await generator.generate(Document.from_bytes("doc", b"x"), templated_preset(""))

        assert compiler.calls[0][1] == DEFAULT_WORKING_DIRECTORY
        host_path, _ = compiler.seen_files[0]
        assert os.path.dirname(os.path.abspath(host_path)) == str(tmp_path)

    @pytest.mark.asyncio
    async def test_compiler_error_is_template_error(self, tmp_path):
        generator = DocumentGenerator(RecordingCompiler(error=RuntimeError("unknown variable")))

        with pytest.raises(TemplateError) as exc_info:
            await generator.generate(Document.from_bytes("doc", b"x"), templated_preset(str(tmp_path)))

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "failed to compile document" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_output_is_template_error(self, tmp_path):
        generator = DocumentGenerator(RecordingCompiler(output=b""))

        with pytest.raises(TemplateError, match="no output was written"):
            await generator.generate(Document.from_bytes("doc", b"x"), templated_preset(str(tmp_path)))

    @pytest.mark.asyncio
    async def test_missing_working_directory(self, tmp_path):
        generator = DocumentGenerator(RecordingCompiler())
        preset = templated_preset(str(tmp_path / "missing"))

        with pytest.raises(TemplateError, match="failed to create temp file"):
            await generator.generate(Document.from_bytes("doc", b"x"), preset)
