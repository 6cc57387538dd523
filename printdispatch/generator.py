"""
Typst document generation.

Presets with a template render the fetched document through Typst before
printing. The fetched file is stored next to the template's working
directory and its path, name and target printer are bound as variables at
the top of the template source:

    #let document_path = "/doc-3k2j1l.pdf"
    #let document_name = "CloudPrintDocument"
    #let printer_name = "office"

document_path is anchored at the compilation root (the working
directory), which is how Typst resolves absolute paths.
"""

import asyncio
import logging
import mimetypes
import os
import re
import shutil
import tempfile
from io import BytesIO
from typing import Any, Protocol

from printdispatch.document import APPLICATION_PDF, PDF_EXTENSION, Document
from printdispatch.errors import TemplateError
from printdispatch.presets import Preset

logger = logging.getLogger(__name__)

try:
    import typst
    TYPST_AVAILABLE = True
except ImportError:
    TYPST_AVAILABLE = False
    logger.warning("typst package not available - templated presets will not render")

DEFAULT_WORKING_DIRECTORY = "./"
OUTPUT_FORMAT_PDF = "pdf"

_MIME_TYPE_RE = re.compile(r"^[\w!#$&^.+-]+/[\w!#$&^.+-]+$")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


class TemplateCompiler(Protocol):
    def compile(self, source: str, working_directory: str, output_format: str = OUTPUT_FORMAT_PDF) -> bytes:
        ...


class TypstCompiler:
    """Compiles Typst source with the typst Python bindings."""

    def compile(self, source: str, working_directory: str, output_format: str = OUTPUT_FORMAT_PDF) -> bytes:
        if not TYPST_AVAILABLE:
            raise RuntimeError("typst package not installed")
        return typst.compile(source.encode("utf-8"), root=working_directory, format=output_format)


def extension_for_mime_type(mime_type: str) -> str:
    """
    Pick the file extension used to store a document of the given type.

    Returns the first extension registered for the mime type, or .pdf when
    the type is empty or unregistered. Malformed types raise TemplateError.
    """
    if not mime_type:
        return PDF_EXTENSION

    media_type = mime_type.split(";", 1)[0].strip().lower()
    if not _MIME_TYPE_RE.match(media_type):
        raise TemplateError(f"failed to get extension for mime type {mime_type}")

    extensions = mimetypes.guess_all_extensions(media_type)
    return extensions[0] if extensions else PDF_EXTENSION


def _typst_literal(value: Any) -> str:
    if value is None:
        return "none"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        escaped = (
            value.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
            .replace("\t", "\\t")
        )
        return f'"{escaped}"'
    raise TypeError(f"unsupported value type {type(value).__name__}")


def inject_values(source: str, values: dict[str, Any]) -> str:
    """Prepend a #let binding for each value to the template source."""
    lines = []
    for name, value in values.items():
        if not _IDENTIFIER_RE.match(name):
            raise TemplateError(f"failed to inject values into document: invalid name {name!r}")
        try:
            literal = _typst_literal(value)
        except TypeError as e:
            raise TemplateError(f"failed to inject values into document: {name}") from e
        lines.append(f"#let {name} = {literal}\n")
    return "".join(lines) + source


def _root_path(path: str, root: str) -> str:
    relative = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    return "/" + relative.replace(os.sep, "/")


class DocumentGenerator:
    """Renders fetched documents through a preset's template."""

    def __init__(
        self,
        compiler: TemplateCompiler = None,
        default_working_directory: str = DEFAULT_WORKING_DIRECTORY
    ):
        self.compiler = compiler or TypstCompiler()
        self.default_working_directory = default_working_directory

    def working_directory(self, preset: Preset) -> str:
        return preset.template.working_directory or self.default_working_directory

    async def generate(self, document: Document, preset: Preset) -> Document:
        """
        Render a document with the preset's template.

        Args:
            document: Fetched document, embedded by the template
            preset: Preset with non-empty template content

        Returns:
            New PDF document with the same name

        Raises:
            TemplateError: if any step of the rendering fails
        """
        working_directory = self.working_directory(preset)
        extension = extension_for_mime_type(document.mime_type)

        try:
            fd, temp_path = tempfile.mkstemp(prefix="doc-", suffix=extension, dir=working_directory)
        except OSError as e:
            raise TemplateError("failed to create temp file") from e

        try:
            try:
                with os.fdopen(fd, "wb") as f:
                    shutil.copyfileobj(document.body, f)
            except OSError as e:
                raise TemplateError("failed to write document") from e

            source = inject_values(preset.template.content, {
                "document_path": _root_path(temp_path, working_directory),
                "document_name": document.name,
                "printer_name": preset.printer,
            })

            loop = asyncio.get_running_loop()
            try:
                output = await loop.run_in_executor(
                    None,
                    self.compiler.compile,
                    source,
                    working_directory,
                    OUTPUT_FORMAT_PDF,
                )
            except Exception as e:
                raise TemplateError("failed to compile document") from e
        finally:
            try:
                os.unlink(temp_path)
            except OSError as e:
                logger.warning(f"Failed to remove temp file {temp_path}: {e}")

        if not output:
            raise TemplateError("no output was written")

        logger.debug(f"Rendered {document.name} with preset {preset.name} ({len(output)} bytes)")

        return Document(
            name=document.name,
            mime_type=APPLICATION_PDF,
            size=len(output),
            body=BytesIO(output),
        )
