from typing import Any, Callable, Literal, Optional

from PySide6.QtCore import QEvent, QObject
from PySide6.QtWidgets import QWidget

# report(key, size, has_initial)
ReportCallback = Callable[[Any, float, bool], None]


class SizeReporter(QObject):
    """
    Reports the size of one widget along the scroll axis whenever it changes.

    Attach one reporter per wrapper widget; the owning view hands in the callback, so
    reports only ever reach the list that created the wrapper.

    Usage:
        reporter = SizeReporter(widget, key, view._on_item_resized, orientation='y')
        reporter.report()   # force a report, e.g. right after mounting

    While `paused` is set, resize events are ignored and do not count as seen, so the first
    report after resuming carries the laid-out size.
    """

    def __init__(self, widget: QWidget, key: Any, report: ReportCallback, orientation: Literal['x', 'y'] = 'y') -> None:
        super().__init__(widget)
        self.widget: Optional[QWidget] = widget
        self.key = key
        self.orientation: Literal['x', 'y'] = orientation
        self._report: Optional[ReportCallback] = report
        self._has_initial: bool = False
        self._last_size: Optional[float] = None
        self.paused: bool = False
        widget.installEventFilter(self)

    @property
    def has_initial(self) -> bool:
        """True once at least one report was delivered."""
        return self._has_initial

    def current_size(self) -> float:
        if self.widget is None:
            return 0.0
        return float(self.widget.width() if self.orientation == 'x' else self.widget.height())

    def report(self) -> None:
        """Deliver the current size, even when it did not change."""
        if self._report is None:
            return
        size = self.current_size()
        self._last_size = size
        has_initial = self._has_initial
        self._has_initial = True
        self._report(self.key, size, has_initial)

    def report_if_changed(self) -> None:
        if self.current_size() != self._last_size:
            self.report()

    def detach(self) -> None:
        """Stop observing. Further size changes are not reported."""
        try:
            if self.widget is not None:
                self.widget.removeEventFilter(self)
        except RuntimeError:
            # Widget already deleted on the C++ side
            pass
        self.widget = None
        self._report = None

    def eventFilter(self, src, evt) -> bool:
        if not self.paused and src is self.widget and evt.type() in (QEvent.Type.Resize, QEvent.Type.LayoutRequest):
            self.report_if_changed()
        return super().eventFilter(src, evt)
