"""androidlib: Locate Android NDK and Genymotion installations on a machine."""

from __future__ import annotations

__version__ = "0.1.0"
