"""Debounced auto-save trigger."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .constants import DEFAULT_AUTOSAVE_DEBOUNCE_MS

logger = logging.getLogger(__name__)


class DebouncedSaveTrigger:
    """Coalesce bursts of edit notifications into a single save.

    Every :meth:`bump` restarts the idle countdown. When the countdown
    expires without another bump, the save callback runs exactly once.
    :meth:`flush_now` saves immediately; :meth:`cancel` drops the pending
    save.

    The countdown is an event-loop timer, so the callback runs on the same
    loop as the code calling :meth:`bump`. Pass ``loop`` to bind an explicit
    loop; otherwise the running loop is used when the countdown starts.

    Callback failures are logged and swallowed so a background save never
    interrupts the caller. :meth:`dispose` does not flush; call
    :meth:`flush_now` first if the pending edit must survive.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        interval_ms: int = DEFAULT_AUTOSAVE_DEBOUNCE_MS,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_saved: Optional[Callable[[], None]] = None,
    ) -> None:
        if callback is None:
            raise ValueError("callback is required")
        self._callback = callback
        self._on_saved = on_saved
        self._loop = loop
        self._interval_ms = interval_ms if interval_ms > 0 else DEFAULT_AUTOSAVE_DEBOUNCE_MS
        self._handle: Optional[asyncio.TimerHandle] = None
        self._disposed = False

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def is_pending(self) -> bool:
        """True while a countdown is running."""
        return self._handle is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def bump(self) -> None:
        """Restart the idle countdown."""
        if self._disposed:
            return
        self._stop()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self._interval_ms / 1000.0, self._on_expired)

    def flush_now(self) -> bool:
        """Cancel any countdown and run the callback now.

        Returns ``True`` when the callback completed without error.
        """
        if self._disposed:
            return False
        self._stop()
        return self._execute()

    def cancel(self) -> None:
        """Stop the countdown without saving."""
        if self._disposed:
            return
        self._stop()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._stop()

    # ------------------------------------------------------------------
    def _stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _on_expired(self) -> None:
        # one-shot
        self._handle = None
        if self._disposed:
            return
        self._execute()

    def _execute(self) -> bool:
        try:
            self._callback()
        except Exception:
            logger.exception("Auto-save callback failed")
            return False
        if self._on_saved is not None:
            try:
                self._on_saved()
            except Exception:
                logger.exception("Auto-save listener failed")
        return True
