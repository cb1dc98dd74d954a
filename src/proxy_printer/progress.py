"""Progress reporting for deck materialization.

The engine does not print anything itself. It notifies a ``ProgressReporter``,
and callers subscribe callbacks to it (the CLI subscribes a console printer).

Usage:
    reporter = ProgressReporter()
    reporter.subscribe(lambda event: print(event.percent, event.error_message))
    reporter.step(Stage.DECK_DETAILS, processed=3, total=10)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from proxy_printer.core.logging import get_logger

logger = get_logger(__name__)


class Stage(str, Enum):
    """Pipeline stage a progress event belongs to."""

    DECK_DETAILS = "deck_details"
    SAVE_TO_DOCUMENT = "save_to_document"


@dataclass(frozen=True)
class ProgressEvent:
    stage: Optional[Stage] = None
    percent: Optional[float] = None
    error_message: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error_message is not None


ProgressObserver = Callable[[ProgressEvent], None]


class ProgressReporter:
    """Relays progress events to subscribed observers.

    Percentages are kept non-decreasing per stage, so observers never see a
    bar move backwards even if a caller reports out of order.
    """

    def __init__(self) -> None:
        self._observers: List[ProgressObserver] = []
        self._last_percent: Dict[Optional[Stage], float] = {}

    def subscribe(self, observer: ProgressObserver) -> ProgressObserver:
        """Register an observer; returns it so it can be unsubscribed later."""
        self._observers.append(observer)
        return observer

    def unsubscribe(self, observer: ProgressObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def reset(self, stage: Optional[Stage] = None) -> None:
        """Forget the last percentage of one stage (or of all stages)."""
        if stage is None:
            self._last_percent.clear()
        else:
            self._last_percent.pop(stage, None)

    def notify(
        self,
        stage: Optional[Stage] = None,
        percent: Optional[float] = None,
        error_message: Optional[str] = None,
    ) -> ProgressEvent:
        if percent is not None:
            percent = min(100.0, max(percent, self._last_percent.get(stage, 0.0)))
            self._last_percent[stage] = percent

        event = ProgressEvent(stage=stage, percent=percent, error_message=error_message)
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("Progress observer {!r} failed", observer)
        return event

    def step(
        self,
        stage: Stage,
        processed: int,
        total: int,
        error_message: Optional[str] = None,
    ) -> ProgressEvent:
        """Report ``processed`` of ``total`` items done."""
        percent = 100.0 * processed / total if total else 100.0
        return self.notify(stage, percent, error_message)

    def error(self, message: str, stage: Optional[Stage] = None) -> ProgressEvent:
        """Report an error without moving the percentage."""
        return self.notify(stage, None, message)


_STAGE_LABELS = {
    Stage.DECK_DETAILS: "Resolving cards",
    Stage.SAVE_TO_DOCUMENT: "Building document",
}


def format_progress(event: ProgressEvent, bar_length: int = 40) -> str:
    """Render an event as a single status line.

    Examples:
        >>> format_progress(ProgressEvent(Stage.DECK_DETAILS, 50.0), bar_length=10)
        'Resolving cards [=====-----] 50.0%'
    """
    label = _STAGE_LABELS.get(event.stage, "Progress") if event.stage else "Progress"
    if event.percent is None:
        line = label
    else:
        filled = int(bar_length * event.percent / 100)
        bar = "=" * filled + "-" * (bar_length - filled)
        line = f"{label} [{bar}] {event.percent:.1f}%"
    if event.error_message:
        line += f" - {event.error_message}"
    return line
