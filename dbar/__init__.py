"""dbar: pick a number with a click-and-drag slider window."""
from __future__ import annotations

from dbar.version import __version__

__all__ = ["__version__"]
