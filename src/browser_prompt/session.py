"""
Prompt session: one prompt window's worth of state.

Ties the resolved candidates, the selection and the dispatch planner
together and turns input events into at most one DispatchAction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable
from uuid import uuid4

from loguru import logger

from browser_prompt.candidates import build_candidate_views, resolve_candidates
from browser_prompt.clipboard import copy_to_clipboard
from browser_prompt.config_loader import PromptConfig
from browser_prompt.dispatch import plan_dispatch
from browser_prompt.errors import Error, Result
from browser_prompt.host_matcher import url_host
from browser_prompt.logging_config import trace_id_var
from browser_prompt.models import (
    ActivationKind,
    CandidateView,
    DispatchAction,
    Handler,
)
from browser_prompt.selection import SelectionState

KEY_UP = "up"
KEY_DOWN = "down"
KEY_RETURN = "return"
KEY_ESCAPE = "escape"
KEY_COPY = "c"

COPY_MODIFIERS = frozenset({"command", "option"})
ALTERNATIVE_COPY_MODIFIERS = frozenset({"command"})

_KEY_ALIASES = {
    "arrowup": KEY_UP,
    "arrowdown": KEY_DOWN,
    "enter": KEY_RETURN,
    "esc": KEY_ESCAPE,
}


@dataclass
class SessionOutcome:
    """Result of feeding one event to the session."""
    action: DispatchAction | None = None
    closed: bool = False
    copied: str | None = None
    errors: list[Error] = field(default_factory=list)


class PromptSession:
    """
    State for one prompt: candidates, selection and the activation rules.

    The configuration snapshot is read-only for the session's lifetime.
    Once the session closes (activation, cancel, or copy with
    close_after_copy) further events are ignored.
    """

    def __init__(
        self,
        urls: Iterable[str],
        config: PromptConfig,
        on_scroll: Callable[[int], None] | None = None,
        copier: Callable[[str], Result[None]] = copy_to_clipboard,
    ):
        self.urls = list(urls)
        self.config = config
        self.trace_id = trace_id_var.get() or str(uuid4())
        self.closed = False
        self._copier = copier

        self.candidates = resolve_candidates(
            self.urls,
            list(config.browsers),
            config.hidden_browsers,
            list(config.apps),
        )
        self.selection = SelectionState(self.candidates.count, on_scroll)

        logger.info(
            "Prompt session started",
            operation="session",
            status="started",
            trace_id=self.trace_id,
            metrics={
                "url_count": len(self.urls),
                "candidates": self.candidates.count,
                "browsers": len(self.candidates.browsers),
                "apps": len(self.candidates.apps),
            }
        )

    # -------------------------------------------------------------------------
    # View model
    # -------------------------------------------------------------------------

    def views(self) -> list[CandidateView]:
        return build_candidate_views(self.candidates, self.config.shortcuts)

    @property
    def selected(self) -> Handler | None:
        if self.selection.is_empty:
            return None
        return self.candidates[self.selection.index]

    @property
    def copy_label(self) -> str | None:
        """Host of the first URL; the copy action is offered only when present."""
        if not self.urls:
            return None
        return url_host(self.urls[0])

    @property
    def copy_modifiers(self) -> frozenset[str]:
        if self.config.alternative_shortcut:
            return ALTERNATIVE_COPY_MODIFIERS
        return COPY_MODIFIERS

    # -------------------------------------------------------------------------
    # Input events
    # -------------------------------------------------------------------------

    def handle_key(self, key: str, modifiers: Iterable[str] = ()) -> SessionOutcome:
        """
        Feed a key press.

        up/down move the selection, Return opens, Shift+Return opens in
        private mode, Escape cancels, and the copy shortcut copies the
        first URL. Anything else is ignored.
        """
        if self.closed:
            return SessionOutcome(closed=True)

        key = key.lower()
        key = _KEY_ALIASES.get(key, key)
        mods = frozenset(m.lower() for m in modifiers)

        if key == KEY_UP:
            self.selection.move_up()
        elif key == KEY_DOWN:
            self.selection.move_down()
        elif key == KEY_RETURN:
            kind = ActivationKind.PRIVATE if "shift" in mods else ActivationKind.PRIMARY
            return self.activate(kind)
        elif key == KEY_ESCAPE:
            return self.activate(ActivationKind.CANCEL)
        elif key == KEY_COPY and mods == self.copy_modifiers:
            return self.copy_first_url()

        return SessionOutcome()

    def hover(self, index: int) -> int:
        if self.closed:
            return self.selection.index
        return self.selection.set_index(index)

    def click(self, index: int, shift: bool = False) -> SessionOutcome:
        """Select a candidate and open it; Shift-click asks for private mode."""
        if self.closed:
            return SessionOutcome(closed=True)
        self.selection.set_index(index)
        return self.activate(ActivationKind.PRIVATE if shift else ActivationKind.PRIMARY)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def activate(self, kind: ActivationKind) -> SessionOutcome:
        """
        Plan the dispatch for the current selection and close the session.

        Scheme-rewrite failures follow `abort_on_rewrite_error`: abort the
        whole batch (default), or keep the URLs that rewrote and report
        the rest.
        """
        if self.closed:
            return SessionOutcome(closed=True)

        if kind is ActivationKind.CANCEL:
            self._close("cancelled")
            return SessionOutcome(closed=True)

        handler = self.selected
        if handler is None:
            logger.debug(
                "Activation ignored - no candidates",
                operation="session",
                status="empty",
                trace_id=self.trace_id
            )
            return SessionOutcome()

        action = plan_dispatch(handler, self.urls, kind)
        errors = list(action.rewrite_errors)

        if errors and (self.config.abort_on_rewrite_error or not action.urls):
            logger.warning(
                "Dispatch aborted - scheme rewrite failed",
                operation="session",
                status="aborted",
                trace_id=self.trace_id,
                metrics={"failed_urls": len(errors), "rewritten_urls": len(action.urls)}
            )
            self._close("aborted")
            return SessionOutcome(closed=True, errors=errors)

        self._close("activated", **action.to_dict())
        return SessionOutcome(action=action, closed=True, errors=errors)

    def copy_first_url(self) -> SessionOutcome:
        """Copy the first URL; closes the session if close_after_copy is set."""
        if self.closed:
            return SessionOutcome(closed=True)
        if self.copy_label is None:
            return SessionOutcome()

        text = self.urls[0]
        result = self._copier(text)
        if result.is_err():
            return SessionOutcome(errors=[result.error])

        if self.config.close_after_copy:
            self._close("copied")
        return SessionOutcome(closed=self.closed, copied=text)

    def _close(self, reason: str, **context) -> None:
        self.closed = True
        logger.info(
            "Prompt session closed",
            operation="session",
            status=reason,
            trace_id=self.trace_id,
            selected_index=self.selection.index,
            **context
        )
