"""
Process-wide OpenAI client.

The client is created lazily on first use and shared by the assistant and
analysis services. Tests swap it out with set_openai_client().
"""

import threading
from typing import Any, Optional

from openai import OpenAI

from hirehiker.core.config import settings

_client: Optional[Any] = None
_client_lock = threading.Lock()


def get_openai_client() -> Any:
    """Return the shared OpenAI client, creating it on first call."""
    global _client

    if _client is None:
        with _client_lock:
            if _client is None:
                _client = OpenAI(api_key=settings.OPENAI_API_KEY or None)
    return _client


def set_openai_client(client: Optional[Any]) -> None:
    """Replace the shared client (None resets to lazy creation)."""
    global _client

    with _client_lock:
        _client = client
