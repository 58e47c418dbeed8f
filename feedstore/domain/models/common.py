"""Defines common Value Objects shared across the feed store.

These are simple values (locations, slot keys, backend names) kept as
NewTypes so signatures say what a plain string or path means.
"""

from pathlib import Path
from typing import NewType

# === Storage Context ===
StoreLocation = NewType("StoreLocation", Path)  # Where a durable backend keeps its slot
SlotKey = NewType("SlotKey", str)               # Fixed key of the single slot in a keyed store
BackendName = NewType("BackendName", str)       # 'memory', 'file' or 'diskcache'

DEFAULT_SLOT_KEY = SlotKey("feed-cache")
