"""Clock source for ascend: UTC instants and the 1 Hz ticker."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(tz=timezone.utc)


def parse_instant(text: str | None) -> datetime | None:
    """Parse an ISO-8601 instant. Returns None for empty or unparseable input.

    Accepts a trailing 'Z' (e.g. '2024-01-01T00:00:00.000Z').
    Naive values are treated as UTC.
    """
    if not text or not isinstance(text, str):
        return None
    raw = text.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_instant(moment: datetime) -> str:
    """Format an instant as 'YYYY-MM-DDTHH:MM:SS.mmmZ' in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class Ticker:
    """Call a function every `interval` seconds on a daemon thread until stopped."""

    def __init__(self, callback: Callable[[], object], interval: float = TICK_SECONDS) -> None:
        self.callback = callback
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="ascend-ticker", daemon=True)
        self._thread.start()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Tick callback failed")

    def stop(self) -> None:
        """Cancel the tick. Safe to call more than once."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(self.interval * 2, 1.0))
        self._thread = None
