"""
Startup checks and validation.

Run before starting the server to catch configuration issues early.
"""

import logging
import socket
import sys
from pathlib import Path
from typing import Optional

from printdispatch.config import CONFIG_DIR_KEY

logger = logging.getLogger(__name__)


def check_port_available(host: str, port: int) -> tuple[bool, Optional[str]]:
    """
    Check if a port is available for binding.

    Returns:
        (True, None) if available
        (False, error_message) if not
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host, port))
        return True, None
    except socket.error as e:
        if e.errno == 10048 or e.errno == 98:  # Windows / Linux "address in use"
            return False, f"Port {port} is already in use. Another service may be running on this port."
        elif e.errno == 10049 or e.errno == 99:  # Can't assign address
            return False, f"Cannot bind to {host}:{port}. Check if the host address is valid."
        elif e.errno == 10013 or e.errno == 13:  # Permission denied
            return False, f"Permission denied for port {port}. Ports below 1024 require admin/root privileges."
        else:
            return False, f"Cannot bind to {host}:{port}: {e}"
    finally:
        sock.close()


def validate_config(config: dict) -> list[str]:
    """
    Validate configuration and return list of warnings/errors.

    Returns:
        List of warning/error messages (empty if all good)
    """
    issues = []

    # Check server config
    server = config.get("server", {})
    port = server.get("port", 8080)

    if not isinstance(port, int) or port < 1 or port > 65535:
        issues.append(f"Invalid port: {port}. Must be between 1 and 65535.")
    elif port < 1024:
        issues.append(f"Port {port} is a privileged port. Consider using a port >= 1024.")

    # Check printers config
    printers = config.get("printers", [])
    if not printers:
        issues.append("No printers configured. Server will use a mock printer.")

    printer_ids = set()
    for i, printer in enumerate(printers):
        pid = printer.get("id")
        if not pid:
            issues.append(f"Printer at index {i} has no 'id' field.")
        elif pid in printer_ids:
            issues.append(f"Duplicate printer ID: '{pid}'")
        else:
            printer_ids.add(pid)

        adapter = printer.get("adapter")
        if not adapter:
            issues.append(f"Printer '{pid}' has no 'adapter' field.")

    # Check presets config
    base_dir = config.get(CONFIG_DIR_KEY)
    presets = config.get("presets") or {}
    for name, preset in presets.items():
        if not isinstance(preset, dict):
            issues.append(f"Preset '{name}' must be a mapping.")
            continue

        printer_id = preset.get("printer")
        if not printer_id:
            issues.append(f"Preset '{name}' has no 'printer' field.")
        elif printer_id not in printer_ids and printers:
            issues.append(f"Preset '{name}' uses unknown printer '{printer_id}'.")

        template = preset.get("template") or {}
        template_file = template.get("file")
        if template_file and not template.get("content"):
            path = Path(template_file)
            if not path.is_absolute() and base_dir:
                path = Path(base_dir) / path
            if not path.is_file():
                issues.append(f"Template file for preset '{name}' not found: {path}")

        working_directory = template.get("working_directory")
        if working_directory and base_dir and not Path(working_directory).is_absolute():
            working_directory = str(Path(base_dir) / working_directory)
        if working_directory and not Path(working_directory).is_dir():
            issues.append(f"Working directory for preset '{name}' does not exist: {working_directory}")

    return issues


def check_dependencies() -> dict[str, bool]:
    """
    Check which optional dependencies are available.

    Returns:
        Dict of dependency name -> is_available
    """
    deps = {}

    # pycups for CUPS printing
    try:
        import cups  # noqa: F401
        deps["pycups"] = True
    except ImportError:
        deps["pycups"] = False

    # typst for templated presets
    try:
        import typst  # noqa: F401
        deps["typst"] = True
    except ImportError:
        deps["typst"] = False

    return deps


def run_startup_checks(config: dict) -> None:
    """
    Run all startup checks. Exits with error if critical issues found.

    Args:
        config: Loaded configuration dict
    """
    logger.info("Running startup checks...")

    errors = []
    warnings = []

    # Check port availability
    server = config.get("server", {})
    host = server.get("host", "0.0.0.0")
    port = server.get("port", 8080)

    available, port_error = check_port_available(host, port)
    if not available:
        errors.append(port_error)

    # Validate config
    for issue in validate_config(config):
        if ("Invalid port" in issue or "Duplicate printer" in issue
                or "Template file" in issue):
            errors.append(issue)
        else:
            warnings.append(issue)

    # Check dependencies
    deps = check_dependencies()
    missing_deps = [name for name, available in deps.items() if not available]
    if missing_deps:
        warnings.append(f"Optional dependencies not installed: {', '.join(missing_deps)}")

    # Report warnings
    for warning in warnings:
        logger.warning(f"  ⚠ {warning}")

    # Report errors and exit if any
    if errors:
        logger.error("Startup checks failed:")
        for error in errors:
            logger.error(f"  ✗ {error}")
        logger.error("")
        logger.error("Fix these issues and try again.")
        sys.exit(1)

    if warnings:
        logger.info(f"Startup checks passed with {len(warnings)} warning(s)")
    else:
        logger.info("Startup checks passed ✓")


def print_startup_banner(config: dict, printers: list, presets: dict) -> None:
    """Print a startup banner with useful info."""
    server = config.get("server", {})
    port = server.get("port", 8080)

    print("")
    print("=" * 50)
    print("  Print Dispatch Server")
    print("=" * 50)
    print("")
    print(f"  Local URL:    http://localhost:{port}")
    print(f"  API Docs:     http://localhost:{port}/docs")
    print("")
    print("  Printers:")
    for printer in printers:
        print(f"    • {printer.name} ({printer.printer_id})")
    print("")
    print("  Presets:")
    for name, info in presets.items():
        print(f"    • {name} -> {info['printer_id']}")
    print("")
    print("  Endpoints:")
    print("    POST /print/url    - Print a document from a URL")
    print("    POST /print/urls   - Print several documents")
    print("    GET  /presets      - List presets")
    print("    GET  /health       - Health check")
    print("    GET  /status       - Printer status")
    print("")
    print("=" * 50)
    print("")
