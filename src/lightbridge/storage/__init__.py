from __future__ import annotations

from .database import Database, LoadedAccessories

__all__ = ["Database", "LoadedAccessories"]
