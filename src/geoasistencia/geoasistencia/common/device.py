from __future__ import annotations

import uuid
from typing import MutableMapping

DEVICE_ID_KEY = "device_id"


def ensure_device_id(store: MutableMapping[str, str], *, key: str = DEVICE_ID_KEY) -> str:
    """Return the device id kept in ``store``, creating a random one on first use.

    ``store`` is anything dict-like that outlives a request (the Flask session
    for the mobile page), so every mark from the same phone carries the same id.
    """
    device_id = store.get(key)
    if not device_id:
        device_id = str(uuid.uuid4())
        store[key] = device_id
    return device_id
