"""Incremental filter/selection sessions.

A ``FilterSession`` holds an immutable snapshot of records and walks one
operator through narrowing it down. Each input line is resolved into exactly
one action:

- ``"0"``            leave the session (``GoBack``)
- ``""``             clear the filter and show the unfiltered prefix
- all digits         select the Nth record of the *current* visible list
- anything else      use the line as the new filter

Any all-digit line is a selection index, never a filter, even when record
names are numeric.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Tuple, Union

from .errors import SessionClosedError
from .matching import SearchableRecord, filter_records

logger = logging.getLogger(__name__)

MAX_RESULTS = 50

_INDEX_RE = re.compile(r"[0-9]+")


def _position(digits: str, count: int) -> int:
    """1-based position for an all-digit line; 0 when it cannot fit ``count``."""
    significant = digits.lstrip("0")
    if len(significant) > len(str(count)):
        return 0
    return int(significant or "0")


# -------------------------
# Views and outcomes
# -------------------------


@dataclass(frozen=True)
class SessionView:
    """What the presenter renders after a step.

    Attributes:
        filter_text: Current filter (empty when unfiltered)
        visible: Records shown, numbered from 1 for this step only
        error: Message for an out-of-range selection, if any
    """

    filter_text: str
    visible: Tuple[SearchableRecord, ...]
    error: Optional[str] = None

    @property
    def filtered(self) -> bool:
        return bool(self.filter_text)

    def record_at(self, index: int) -> Optional[SearchableRecord]:
        """Resolve a 1-based position against this view."""
        if 1 <= index <= len(self.visible):
            return self.visible[index - 1]
        return None


@dataclass(frozen=True)
class Selected:
    record: SearchableRecord


@dataclass(frozen=True)
class GoBack:
    pass


@dataclass(frozen=True)
class Continue:
    view: SessionView


SessionOutcome = Union[Selected, GoBack, Continue]


# -------------------------
# Session
# -------------------------


class FilterSession:
    """State machine for one filter/selection interaction.

    The snapshot is copied at construction and never re-read, so changes to
    the underlying store are only seen by a new session.
    """

    def __init__(
        self,
        snapshot: Iterable[SearchableRecord],
        max_results: Optional[int] = MAX_RESULTS,
        noun: str = "item",
    ) -> None:
        self._snapshot: Tuple[SearchableRecord, ...] = tuple(snapshot)
        self._max_results = max_results
        self._noun = noun
        self._view: Optional[SessionView] = None
        self._outcome: Optional[Union[Selected, GoBack]] = None

    @property
    def snapshot(self) -> Tuple[SearchableRecord, ...]:
        return self._snapshot

    @property
    def view(self) -> SessionView:
        if self._view is None:
            return self.start()
        return self._view

    @property
    def terminated(self) -> bool:
        return self._outcome is not None

    @property
    def outcome(self) -> Optional[Union[Selected, GoBack]]:
        return self._outcome

    def start(self) -> SessionView:
        """Show the unfiltered prefix of the snapshot."""
        self._view = self._compute("")
        logger.debug(
            "Session started with %d records (%d visible)",
            len(self._snapshot),
            len(self._view.visible),
        )
        return self._view

    def _compute(self, filter_text: str) -> SessionView:
        visible = filter_records(self._snapshot, filter_text, self._max_results)
        return SessionView(filter_text=filter_text, visible=tuple(visible))

    def step(self, line: str) -> SessionOutcome:
        """Resolve one input line against the current view.

        Args:
            line: Raw input line without its trailing newline

        Returns:
            ``Selected`` or ``GoBack`` when the session ends, otherwise
            ``Continue`` with the view to render next

        Raises:
            SessionClosedError: If the session already terminated
        """
        if self._outcome is not None:
            raise SessionClosedError("filter session already terminated")

        current = self.view

        if line == "0":
            logger.debug("Session closed by operator")
            self._outcome = GoBack()
            return self._outcome

        if line == "":
            self._view = self._compute("")
            return Continue(self._view)

        if _INDEX_RE.fullmatch(line):
            record = current.record_at(_position(line, len(current.visible)))
            if record is not None:
                logger.debug("Selected %r at position %s", record.record_id, line)
                self._outcome = Selected(record)
                return self._outcome
            logger.debug(
                "Selection %s out of range (1-%d)", line[:20], len(current.visible)
            )
            self._view = SessionView(
                filter_text=current.filter_text,
                visible=current.visible,
                error=f"Invalid number. Please select a valid {self._noun} number.",
            )
            return Continue(self._view)

        self._view = self._compute(line)
        logger.debug("Filter %r shows %d records", line, len(self._view.visible))
        return Continue(self._view)


# -------------------------
# Driver
# -------------------------


class Presenter(Protocol):
    def show(self, view: SessionView) -> None: ...

    def read_line(self) -> Optional[str]: ...


def run_session(
    session: FilterSession, presenter: Presenter
) -> Optional[SearchableRecord]:
    """Drive ``session`` until it terminates.

    End of input (``read_line`` returning None) is treated like ``"0"``.

    Returns:
        The selected record, or None if the operator went back
    """
    presenter.show(session.start())
    while True:
        line = presenter.read_line()
        outcome = session.step("0" if line is None else line)
        if isinstance(outcome, Selected):
            return outcome.record
        if isinstance(outcome, GoBack):
            return None
        presenter.show(outcome.view)
