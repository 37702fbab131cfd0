"""HTML demo page for devices, services and files."""

from __future__ import annotations

from collections.abc import Iterable
from html import escape

from .native.models import Device, PogoFile

SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]

PAGE_TITLE = "Pogoplug API - Test"

ROW_TEMPLATE = "<tr><td>{}</td><td>{}</td><td>{}</td><td>{}</td></tr>"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>{title}</title>
</head>
<body>
    <div id="header-container">
        <header class="wrapper">
            <h1 id="title">{title}</h1>
        </header>
    </div>
    <div id="main" class="wrapper">
        <article>
            <header>
                <h2>Devices</h2>
            </header>
            <table>
{devices}
            </table>
            <h3>Device Services</h3>
            <table>
{services}
            </table>
            <h3>Files</h3>
            <table>
{files}
            </table>
        </article>
    </div>
</body>
</html>
"""


def file_size(size: int) -> str:
    """Format a byte count with binary units, e.g. 1536 -> "1.5 KB"."""
    if size <= 0:
        return "0 Bytes"

    index = 0
    while index < len(SIZE_UNITS) - 1 and size >= 1024 ** (index + 1):
        index += 1

    value = round(size / 1024**index, 2)
    number = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{number} {SIZE_UNITS[index]}"


def _row(*cells: object) -> str:
    return ROW_TEMPLATE.format(*(escape(str(cell)) for cell in cells))


def render_demo_page(devices: Iterable[Device], files: Iterable[PogoFile]) -> str:
    """Render devices, their services and a file listing as an HTML page.

    Args:
        devices: Devices as returned by PogoplugClient.list_devices().
        files: Files as returned by PogoplugClient.list_files().

    Returns:
        The complete HTML document.
    """
    device_rows = []
    service_rows = []

    for device in devices:
        for service in device.services:
            first, second = service.space_figures
            space = f"{file_size(first)} / {file_size(second)}"
            service_rows.append(
                _row(device.name, service.service_id, service.name, space)
            )
        device_rows.append(_row(device.device_id, device.name, device.version, ""))

    file_rows = [
        _row(f.name, f.file_id, file_size(f.size), f.type) for f in files
    ]

    return PAGE_TEMPLATE.format(
        title=escape(PAGE_TITLE),
        devices="\n".join(device_rows),
        services="\n".join(service_rows),
        files="\n".join(file_rows),
    )
