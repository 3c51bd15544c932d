"""In-memory cookie jar for the RCI session.

The router rotates its session cookie on /auth responses (and sometimes on
error responses), so every response is merged here and the jar is replayed
as a single Cookie header on every request. Cookie attributes such as path
and expiry are discarded.
"""

import threading
from typing import Dict, Iterable, Optional

import httpx


class CookieJar:
    """Mutable cookie name -> value map shared by all requests of a session."""

    def __init__(self) -> None:
        self._cookies: Dict[str, str] = {}
        self._lock = threading.Lock()

    def update_from_response(self, response: httpx.Response) -> None:
        """Merge every Set-Cookie header of a response into the jar."""
        self.update_from_headers(response.headers.get_list("set-cookie"))

    def update_from_headers(self, set_cookie_headers: Iterable[str]) -> None:
        """Merge raw Set-Cookie header values into the jar.

        Only the leading name=value pair is kept. Later values overwrite
        earlier ones with the same name.
        """
        parsed = []
        for header in set_cookie_headers:
            pair = header.split(";", 1)[0]
            name, _, value = pair.partition("=")
            name = name.strip()
            if name:
                parsed.append((name, value.strip()))

        if not parsed:
            return

        with self._lock:
            for name, value in parsed:
                self._cookies[name] = value

    def header_value(self) -> Optional[str]:
        """Serialize the jar as a Cookie header value, or None if empty."""
        with self._lock:
            if not self._cookies:
                return None
            return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    def as_dict(self) -> Dict[str, str]:
        """Return a snapshot copy of the jar."""
        with self._lock:
            return dict(self._cookies)

    def clear(self) -> None:
        with self._lock:
            self._cookies.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._cookies

    def __len__(self) -> int:
        with self._lock:
            return len(self._cookies)
