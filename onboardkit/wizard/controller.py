"""Linear wizard state machine driving page flushes and auto-save."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from ..autosave import DebouncedSaveTrigger
from ..constants import DEFAULT_AUTOSAVE_DEBOUNCE_MS
from ..drafts import DraftStore, NamingConvention
from ..errors import WizardStateError
from ..models import OnboardingRecord
from .pages import EmailSyncTarget, UsernameSuggestionTarget, WizardPage

logger = logging.getLogger(__name__)

FinalizeHook = Callable[[OnboardingRecord], None]


class WizardController:
    """Page through a draft, saving on every transition.

    Only forward navigation is gated by page validation. Back, save-and-close
    and teardown always flush the active page so the user is never trapped
    by an incomplete required field. Field edits only bump the debounced
    auto-save; every navigation flushes synchronously and propagates write
    errors.

    The auto-save timer runs on ``loop``, or on the loop running when the
    controller is built. Building one with neither raises
    :class:`WizardStateError`. ``naming`` defaults to the store's naming
    convention.
    """

    def __init__(
        self,
        store: DraftStore,
        pages: Sequence[WizardPage],
        record: OnboardingRecord,
        *,
        start_page: int = 0,
        debounce_ms: int = DEFAULT_AUTOSAVE_DEBOUNCE_MS,
        naming: Optional[NamingConvention] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_saved: Optional[Callable[[], None]] = None,
        on_finalize: Optional[FinalizeHook] = None,
    ) -> None:
        if not pages:
            raise ValueError("A wizard needs at least one page")
        self._store = store
        self._pages: List[WizardPage] = list(pages)
        self._record = record
        self._naming = naming if naming is not None else store.naming
        self._on_finalize = on_finalize
        self._index = max(0, min(start_page, len(self._pages) - 1))
        self._closed = False
        self._autosave = DebouncedSaveTrigger(
            self._auto_save, debounce_ms, loop=_resolve_loop(loop), on_saved=on_saved
        )
        for page in self._pages:
            page.subscribe(self._on_page_data_changed)
        self._load_current_page()

    # ------------------------------------------------------------------
    # Factories
    @classmethod
    def start_new(
        cls,
        store: DraftStore,
        pages: Sequence[WizardPage],
        first_name: str,
        last_name: str,
        **kwargs,
    ) -> "WizardController":
        """Create a fresh draft and open it on the first page."""
        kwargs["loop"] = _resolve_loop(kwargs.get("loop"))
        record = store.create(first_name, last_name, 0)
        return cls(store, pages, record, start_page=0, **kwargs)

    @classmethod
    def resume(
        cls,
        store: DraftStore,
        pages: Sequence[WizardPage],
        record_id: str,
        last_page_index: int = 0,
        **kwargs,
    ) -> Optional["WizardController"]:
        """Reopen an existing draft; ``None`` if its file is gone."""
        record = store.load(record_id)
        if record is None:
            return None
        return cls(store, pages, record, start_page=last_page_index, **kwargs)

    # ------------------------------------------------------------------
    # State
    @property
    def record(self) -> OnboardingRecord:
        return self._record

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_page(self) -> WizardPage:
        return self._pages[self._index]

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index == len(self._pages) - 1

    @property
    def can_go_back(self) -> bool:
        return not self._closed and not self.is_first

    @property
    def can_go_next(self) -> bool:
        return not self._closed and not self.is_last

    @property
    def can_finalize(self) -> bool:
        return not self._closed and self.is_last

    @property
    def progress(self) -> float:
        return (self._index + 1) / len(self._pages)

    @property
    def step_label(self) -> str:
        return f"Step {self._index + 1} of {len(self._pages)}"

    @property
    def is_save_pending(self) -> bool:
        return self._autosave.is_pending

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Transitions
    def next(self) -> Optional[str]:
        """Validate, flush and advance.

        Returns the validation message when the move is refused; nothing is
        saved in that case.
        """
        self._ensure_open()
        error = self.current_page.validate()
        if error:
            logger.debug(f"Next refused on page {self._index}: {error}")
            return error
        self._flush_and_save()
        if not self.is_last:
            self._index += 1
            self._load_current_page()
        return None

    def back(self) -> bool:
        """Flush and move back one page; ``False`` on the first page."""
        self._ensure_open()
        if self.is_first:
            return False
        self._flush_and_save()
        self._index -= 1
        self._load_current_page()
        return True

    def save(self) -> None:
        """Flush the active page and persist without moving."""
        self._ensure_open()
        self._flush_and_save()

    def save_and_close(self) -> OnboardingRecord:
        """Flush synchronously, then release the wizard."""
        self._ensure_open()
        self._flush_and_save()
        self._teardown()
        return self._record

    def finalize(self) -> OnboardingRecord:
        """Flush the draft and hand it to the finalize hook.

        Only allowed on the last page. The draft is durably saved before the
        hook runs.
        """
        self._ensure_open()
        if not self.is_last:
            raise WizardStateError("Finalize is only available on the last page")
        self._flush_and_save()
        if self._on_finalize is None:
            logger.info(
                f"Draft {self._record.record_id} saved; export on finalize is not available"
            )
        else:
            self._on_finalize(self._record)
        return self._record

    def close(self) -> None:
        """Save anything pending and release the auto-save timer."""
        if self._closed:
            return
        self._autosave.flush_now()
        self._teardown()

    def discard(self) -> None:
        """Drop any pending auto-save and release the wizard without saving."""
        if self._closed:
            return
        self._autosave.cancel()
        self._teardown()

    def __enter__(self) -> "WizardController":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    def _ensure_open(self) -> None:
        if self._closed:
            raise WizardStateError("The wizard has been closed")

    def _teardown(self) -> None:
        self._autosave.dispose()
        for page in self._pages:
            page.unsubscribe(self._on_page_data_changed)
        self._closed = True

    def _on_page_data_changed(self, page: WizardPage) -> None:
        if self._closed or page is not self.current_page:
            return
        self._autosave.bump()

    def _write_current_page(self) -> None:
        self.current_page.save_data(self._record)
        self._store.save(self._record, self._index)

    def _flush_and_save(self) -> None:
        self._autosave.cancel()
        self._write_current_page()

    def _auto_save(self) -> None:
        self._write_current_page()

    def _load_current_page(self) -> None:
        self._propagate_derived_fields()
        self.current_page.load_data(self._record)
        self._push_derived_fields()

    def _propagate_derived_fields(self) -> None:
        """Recompute record fields that derive from other pages.

        The email follows the name only while the override flag is unset.
        """
        record = self._record
        if self._naming is None or record.email_overridden:
            return
        generated = self._naming.generate_email(
            record.employee_first_name, record.employee_last_name
        )
        if generated:
            record.email_address = generated

    def _push_derived_fields(self) -> None:
        record = self._record
        for page in self._pages:
            if isinstance(page, UsernameSuggestionTarget):
                page.suggest_username(record.employee_first_name, record.employee_last_name)
            if isinstance(page, EmailSyncTarget) and record.email_address:
                page.sync_email(record.email_address)


def _resolve_loop(
    loop: Optional[asyncio.AbstractEventLoop],
) -> asyncio.AbstractEventLoop:
    if loop is not None:
        return loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise WizardStateError(
            "WizardController needs a running event loop or an explicit loop= argument"
        ) from e
