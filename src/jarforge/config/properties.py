"""Process-wide property table.

Integration hooks receive the invocation's properties explicitly. Some hooks
still read ambient properties, so the build also overlays them onto this
table for the duration of the hook call and restores it afterwards.
"""

import os
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Mapping, Optional

_lock = threading.Lock()
_properties: Dict[str, str] = {}


def get_property(key: str, default: Optional[str] = None) -> Optional[str]:
    """Read a property, falling back to a JARFORGE_PROP_<KEY> environment variable."""
    with _lock:
        if key in _properties:
            return _properties[key]
    env_key = "JARFORGE_PROP_" + key.upper().replace(".", "_").replace("-", "_")
    return os.environ.get(env_key, default)


def system_properties() -> Dict[str, str]:
    """Snapshot of the current property table."""
    with _lock:
        return dict(_properties)


def set_property(key: str, value: str) -> None:
    with _lock:
        _properties[key] = value


@contextmanager
def override_properties(overrides: Mapping[str, str]) -> Iterator[Dict[str, str]]:
    """Overlay ``overrides`` onto the property table for the enclosed block.

    The previous table is restored on every exit path, including when the
    block raises.

    Yields:
        Snapshot of the table as seen inside the block
    """
    with _lock:
        saved = dict(_properties)
        _properties.update(overrides)
        snapshot = dict(_properties)
    try:
        yield snapshot
    finally:
        with _lock:
            _properties.clear()
            _properties.update(saved)
