"""Windowing host interfaces and the headless implementation."""
from __future__ import annotations

from waymux.host.base import UnmapCallback, View, ViewHost
from waymux.host.headless import HeadlessHost, HeadlessView

__all__ = [
    "HeadlessHost",
    "HeadlessView",
    "UnmapCallback",
    "View",
    "ViewHost",
]
