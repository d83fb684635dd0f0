"""System tray summary of the tracked shipment."""

from parcelwatch.tray.menu import CLOSE_INDEX, COPY_INDEX, TrayItem, TrayMenu, build_menu
from parcelwatch.tray.supervisor import TrayProcessHandle, TraySupervisor

__all__ = [
    "CLOSE_INDEX",
    "COPY_INDEX",
    "TrayItem",
    "TrayMenu",
    "TrayProcessHandle",
    "TraySupervisor",
    "build_menu",
]
