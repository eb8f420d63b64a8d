"""Session subpackage: per-instance state and lifecycle."""
from __future__ import annotations

from waymux.session.manager import DEFAULT_INSTANCE_NAME, InstanceManager
from waymux.session.state import MuxSession

__all__ = ["DEFAULT_INSTANCE_NAME", "InstanceManager", "MuxSession"]
