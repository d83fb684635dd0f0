"""The native tray process.

Started by :class:`~parcelwatch.tray.supervisor.TraySupervisor` once per
cycle. Reads one JSON encoded :class:`~parcelwatch.tray.menu.TrayMenu` line
from stdin, shows it with pystray and writes the index of every clicked
item to stdout, one per line.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any

import pystray
from PIL import Image, ImageDraw

from parcelwatch.tray.menu import CLOSE_INDEX, TrayMenu

_logger = logging.getLogger(__name__)


def create_icon_image(size: int = 64) -> Image.Image:
    """Draw a small parcel icon."""
    image = Image.new("RGBA", (size, size), color=(0, 0, 0, 0))
    dc = ImageDraw.Draw(image)
    pad = size // 8
    dc.rounded_rectangle([pad, pad, size - pad, size - pad], radius=size // 8, fill="#b5835a", outline="#6b4a2f", width=2)
    mid = size // 2
    dc.rectangle([mid - size // 16, pad, mid + size // 16, size - pad], fill="#e8d3b0")
    dc.rectangle([pad, mid - size // 16, size - pad, mid + size // 16], fill="#e8d3b0")
    return image


def _emit(index: int) -> None:
    sys.stdout.write(f"{index}\n")
    sys.stdout.flush()


def _make_action(index: int) -> Callable[[Any, Any], None]:
    def action(icon: Any, _item: Any) -> None:
        _emit(index)
        if index == CLOSE_INDEX:
            icon.stop()

    return action


def build_pystray_menu(menu: TrayMenu) -> pystray.Menu:
    entries = []
    for index, item in enumerate(menu.items):
        checked = (lambda _item: True) if item.checked else None
        entries.append(
            pystray.MenuItem(
                item.title,
                _make_action(index),
                checked=checked,
                enabled=item.enabled,
            )
        )
    return pystray.Menu(*entries)


def main() -> int:
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    line = sys.stdin.readline()
    if not line.strip():
        _logger.error("No menu received on stdin")
        return 2
    menu = TrayMenu.model_validate_json(line)
    icon = pystray.Icon("parcelwatch", create_icon_image(), menu.tooltip, build_pystray_menu(menu))
    icon.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
