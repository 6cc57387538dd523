"""
Configuration loading, printer and preset setup.
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml

from printdispatch.fetcher import Fetcher
from printdispatch.presets import PresetRegistry
from printdispatch.printers import PrinterRegistry
from printdispatch.printers.cups_adapter import CUPSAdapter
from printdispatch.printers.mock import MockPrinter

logger = logging.getLogger(__name__)

# Map adapter types to classes
ADAPTER_TYPES = {
    "mock": MockPrinter,
    "cups": CUPSAdapter,
}

# Key under which the loader records where the config came from
CONFIG_DIR_KEY = "_config_dir"


def find_config(config_path: Optional[str] = None) -> Optional[Path]:
    """
    Locate the configuration file.

    Looks for config in order:
    1. Explicit path if provided
    2. CONFIG_FILE environment variable
    3. ./config/local.yaml
    4. ./config/default.yaml
    """
    search_paths = []

    if config_path:
        search_paths.append(Path(config_path))

    if env_path := os.environ.get("CONFIG_FILE"):
        search_paths.append(Path(env_path))

    # Default paths relative to project root
    project_root = Path(__file__).parent.parent
    search_paths.extend([
        project_root / "config" / "local.yaml",
        project_root / "config" / "default.yaml",
    ])

    for path in search_paths:
        if path.exists():
            return path
    return None


def load_config(config_path: Optional[str] = None) -> dict:
    """Load configuration from YAML file."""
    path = find_config(config_path)
    if path is None:
        logger.warning("No config file found, using defaults")
        return {}

    logger.info(f"Loading config from {path}")
    with open(path) as f:
        config = yaml.safe_load(f) or {}
    config[CONFIG_DIR_KEY] = str(path.resolve().parent)
    return config


def setup_printers(config: dict) -> PrinterRegistry:
    """
    Set up printers from configuration.

    Config format:
        printers:
          - id: office
            name: Office Printer
            adapter: cups
            config:
              cups_name: Brother_MFC
              cups_server: print.example.lan

          - id: test
            adapter: mock
    """
    registry = PrinterRegistry()

    printer_configs = config.get("printers", [])

    if not printer_configs:
        # Default to a mock printer for development
        logger.info("No printers configured, using mock printer")
        registry.register(MockPrinter("default", "Mock Printer"))
        return registry

    for printer_conf in printer_configs:
        printer_id = printer_conf.get("id")
        name = printer_conf.get("name", printer_id)
        adapter_type = printer_conf.get("adapter")
        adapter_config = printer_conf.get("config", {})

        if not printer_id:
            logger.warning("Printer config missing 'id', skipping")
            continue

        if adapter_type not in ADAPTER_TYPES:
            logger.warning(f"Unknown adapter type '{adapter_type}' for {printer_id}, skipping")
            continue

        adapter_class = ADAPTER_TYPES[adapter_type]
        try:
            printer = adapter_class(printer_id, name, adapter_config)
            registry.register(printer)
            logger.info(f"Registered printer: {name} ({printer_id}) using {adapter_type}")
        except Exception as e:
            logger.error(f"Failed to initialize printer {printer_id}: {e}")

    return registry


def setup_presets(config: dict) -> PresetRegistry:
    """Set up presets from configuration. Template files resolve against the config directory."""
    registry = PresetRegistry()
    base_dir = config.get(CONFIG_DIR_KEY)
    registry.load_config(config, Path(base_dir) if base_dir else None)
    return registry


def setup_fetcher(config: dict) -> Fetcher:
    """Create the document fetcher."""
    fetcher_conf = config.get("fetcher", {})
    return Fetcher(timeout_sec=fetcher_conf.get("timeout_sec", 30.0))


def get_server_config(config: dict) -> dict:
    """Extract server configuration."""
    server = config.get("server", {})
    return {
        "host": server.get("host", "0.0.0.0"),
        "port": server.get("port", 8080),
        "debug": server.get("debug", False),
        "cors_origins": server.get("cors_origins", None),
    }
