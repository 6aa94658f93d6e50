"""Debounced autosave for an interactive note editing session.

Every local edit flips the session to ``saving`` at once. Typed fields
(title, content) are debounced per field: rapid edits keep pushing the save
back and only the last value in a quiet period is sent. Discrete fields
(icon, cover) are sent immediately. A save that succeeds moves the session to
``saved``; one that fails moves it to ``error`` until the next edit.

Closing the session flushes pending debounced saves instead of dropping them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from functools import partial
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

Persist = Callable[[dict[str, Any]], Awaitable[Any]]


class SaveStatus(str, Enum):
    SAVED = "saved"
    SAVING = "saving"
    ERROR = "error"


class Debouncer:
    """
    Calls ``callback(value)`` once ``delay`` seconds pass without a new value.

    Only one timer exists at a time. Cancelling or rescheduling never aborts a
    call that has already started.
    """

    def __init__(self, delay: float, callback: Callable[[Any], Awaitable[None]]):
        self.delay = delay
        self._callback = callback
        self._timer: asyncio.TimerHandle | None = None
        self._value: Any = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a call is scheduled but has not started."""
        return self._timer is not None

    def schedule(self, value: Any) -> None:
        """(Re)start the quiet period with ``value`` as the one to send."""
        self.cancel()
        self._value = value
        self._timer = asyncio.get_running_loop().call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the scheduled call, if any."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._value = None

    async def flush(self) -> None:
        """Start the scheduled call now and wait for every call in flight."""
        if self._timer is not None:
            self._timer.cancel()
            self._fire()

        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    def _fire(self) -> None:
        self._timer = None
        value, self._value = self._value, None

        task = asyncio.get_running_loop().create_task(self._callback(value))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)


class AutosaveSession:
    """Autosave state for one note being edited."""

    DEBOUNCED_FIELDS = ("title", "content")
    IMMEDIATE_FIELDS = ("icon", "cover_url")

    def __init__(
        self,
        persist: Persist,
        delay: float = 1.5,
        on_status: Callable[[SaveStatus], None] | None = None,
        initial: dict[str, Any] | None = None,
    ):
        """
        Args:
            persist: Coroutine sending ``{field: value}`` to the server; raising means failure
            delay: Debounce window for typed fields, in seconds
            on_status: Called on every status change
            initial: Field values already stored, so re-sending them is skipped
        """
        self._persist = persist
        self._on_status = on_status
        self._last_saved: dict[str, Any] = dict(initial or {})
        self._debouncers = {
            field: Debouncer(delay, partial(self._save, field)) for field in self.DEBOUNCED_FIELDS
        }
        self._in_flight: set[asyncio.Task] = set()
        self._closed = False

        self.status = SaveStatus.SAVED
        self.error: str | None = None

    @property
    def pending(self) -> bool:
        return any(d.pending for d in self._debouncers.values()) or bool(self._in_flight)

    def edit(self, field: str, value: Any) -> None:
        """Record a local edit and schedule it to be persisted."""
        if self._closed:
            raise RuntimeError("Autosave session is closed")

        if field in self._debouncers:
            self._set_status(SaveStatus.SAVING)
            self._debouncers[field].schedule(value)
        elif field in self.IMMEDIATE_FIELDS:
            self._set_status(SaveStatus.SAVING)
            task = asyncio.get_running_loop().create_task(self._save(field, value))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
        else:
            raise ValueError(f"Field cannot be autosaved: {field}")

    def set_title(self, title: str) -> None:
        self.edit("title", title)

    def set_content(self, content: str) -> None:
        self.edit("content", content)

    def set_icon(self, icon: str | None) -> None:
        self.edit("icon", icon)

    def set_cover(self, cover_url: str | None) -> None:
        self.edit("cover_url", cover_url)

    async def close(self) -> None:
        """Flush pending debounced saves and wait for all saves to finish."""
        self._closed = True
        await asyncio.gather(*(d.flush() for d in self._debouncers.values()))
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        logger.debug("autosave_session_closed", status=self.status.value)

    async def __aenter__(self) -> AutosaveSession:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _save(self, field: str, value: Any) -> None:
        if field in self._last_saved and self._last_saved[field] == value:
            self._set_status(SaveStatus.SAVED)
            return

        try:
            await self._persist({field: value})
        except Exception as e:
            logger.warning("autosave_failed", field=field, error=str(e), error_type=type(e).__name__)
            self.error = str(e) or type(e).__name__
            self._set_status(SaveStatus.ERROR)
            return

        self._last_saved[field] = value
        self.error = None
        self._set_status(SaveStatus.SAVED)

    def _set_status(self, status: SaveStatus) -> None:
        if status is SaveStatus.SAVING:
            self.error = None
        if status is self.status:
            return

        self.status = status
        if self._on_status is not None:
            self._on_status(status)
