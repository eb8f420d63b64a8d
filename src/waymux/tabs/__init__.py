"""Tab directory subpackage."""
from __future__ import annotations

from waymux.tabs.directory import Tab, TabDirectory, TabState

__all__ = ["Tab", "TabDirectory", "TabState"]
