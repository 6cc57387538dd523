"""
Named print presets.

A preset bundles a target printer, print-protocol job attributes and an
optional Typst template. Clients name a preset, the server decides where
and how the document is printed.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class TemplateDefinition:
    content: str = ""
    working_directory: str = ""


@dataclass
class Preset:
    name: str
    printer: str
    job_attributes: dict = field(default_factory=dict)
    template: TemplateDefinition = field(default_factory=TemplateDefinition)
    description: str = ""

    @property
    def templated(self) -> bool:
        """True when documents must be rendered before printing."""
        return self.template.content != ""


class PresetRegistry:
    """
    Resolves preset names to presets.

    Config example:
        presets:
          plain:
            printer: office
            job_attributes:
              media: iso_a4_210x297mm
          shipping-label:
            printer: label
            description: "Label with a Typst frame"
            template:
              file: templates/label.typ
              working_directory: ./templates

    Template files and working directories are resolved relative to base_dir
    (the config file's directory) unless absolute.
    """

    def __init__(self):
        self._presets: dict[str, Preset] = {}

    def load_config(self, config: dict, base_dir: Optional[Path] = None) -> None:
        """Load presets from configuration."""
        presets = config.get("presets") or {}

        for name, conf in presets.items():
            if not isinstance(conf, dict):
                logger.warning(f"Preset '{name}' is not a mapping, skipping")
                continue

            template_conf = conf.get("template") or {}
            content = template_conf.get("content", "")
            if not content and template_conf.get("file"):
                content = self._read_template_file(template_conf["file"], base_dir)

            self._presets[name] = Preset(
                name=name,
                printer=conf.get("printer", ""),
                job_attributes=dict(conf.get("job_attributes") or {}),
                template=TemplateDefinition(
                    content=content,
                    working_directory=self._resolve_directory(
                        template_conf.get("working_directory", ""), base_dir
                    ),
                ),
                description=conf.get("description", ""),
            )

    @staticmethod
    def _resolve_directory(directory: str, base_dir: Optional[Path]) -> str:
        if not directory or base_dir is None or Path(directory).is_absolute():
            return directory
        return str(base_dir / directory)

    @staticmethod
    def _read_template_file(file_name: str, base_dir: Optional[Path]) -> str:
        path = Path(file_name)
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        return path.read_text(encoding="utf-8")

    def get(self, name: str) -> Optional[Preset]:
        """Get a preset by name. Returns None if not configured."""
        return self._presets.get(name)

    def list_presets(self) -> dict[str, dict]:
        """List all configured presets for API discovery."""
        return {
            name: {
                "printer_id": preset.printer,
                "templated": preset.templated,
                "description": preset.description,
            }
            for name, preset in self._presets.items()
        }

    def add(self, preset: Preset) -> None:
        """Programmatically add a preset (useful for testing)."""
        self._presets[preset.name] = preset

    def __len__(self) -> int:
        return len(self._presets)
