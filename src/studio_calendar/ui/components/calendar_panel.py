from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable, List, Optional

from PyQt6.QtCore import QDate, Qt, pyqtSignal
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QCalendarWidget,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...services import DisplayEvent, EventActivated, EventMoved, RangeSelected, ViewWindowChanged

NUDGE = timedelta(minutes=30)


def _month_window(year: int, month: int, tz: tzinfo) -> tuple[datetime, datetime]:
    start = datetime(year, month, 1, tzinfo=tz)
    end = datetime(year + (month == 12), month % 12 + 1, 1, tzinfo=tz)
    return start, end


class CalendarPanel(QWidget):
    """Month grid plus the selected day's agenda.

    Every user gesture is reported through ``widget_event`` as one of the
    widget event dataclasses; the panel never talks to storage.
    """

    widget_event = pyqtSignal(object)
    new_event_requested = pyqtSignal(object)
    assign_requested = pyqtSignal(str)
    refresh_requested = pyqtSignal()

    def __init__(self, *, tz: tzinfo) -> None:
        super().__init__()
        self.setObjectName("calendarPanel")
        self.tz = tz
        self.allow: Callable[[str], bool] = lambda _event_id: True
        self._events: List[DisplayEvent] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        header = QHBoxLayout()
        self.title_label = QLabel("")
        self.title_label.setObjectName("title")
        header.addWidget(self.title_label, stretch=1)
        refresh = QPushButton("Refresh")
        refresh.setObjectName("secondaryButton")
        refresh.clicked.connect(self.refresh_requested.emit)
        header.addWidget(refresh)
        new_event = QPushButton("New event")
        new_event.clicked.connect(self._request_new_event)
        header.addWidget(new_event)
        layout.addLayout(header)

        self.calendar_widget = QCalendarWidget()
        self.calendar_widget.setGridVisible(False)
        self.calendar_widget.currentPageChanged.connect(self._emit_window)
        self.calendar_widget.selectionChanged.connect(self._render_day)
        self.calendar_widget.activated.connect(self._select_day)
        layout.addWidget(self.calendar_widget)

        self.day_label = QLabel("")
        self.day_label.setObjectName("hint")
        layout.addWidget(self.day_label)

        self.event_list = QListWidget()
        self.event_list.itemDoubleClicked.connect(self._activate_item)
        self.event_list.itemSelectionChanged.connect(self._sync_buttons)
        layout.addWidget(self.event_list, stretch=1)

        actions = QHBoxLayout()
        self.earlier_button = QPushButton("Earlier")
        self.later_button = QPushButton("Later")
        self.longer_button = QPushButton("Longer")
        self.shorter_button = QPushButton("Shorter")
        self.assign_button = QPushButton("Assign task")
        self.earlier_button.clicked.connect(lambda: self._nudge(-NUDGE, resize=False))
        self.later_button.clicked.connect(lambda: self._nudge(NUDGE, resize=False))
        self.longer_button.clicked.connect(lambda: self._nudge(NUDGE, resize=True))
        self.shorter_button.clicked.connect(lambda: self._nudge(-NUDGE, resize=True))
        self.assign_button.clicked.connect(self._request_assignment)
        for button in (self.earlier_button, self.later_button, self.longer_button, self.shorter_button, self.assign_button):
            button.setObjectName("secondaryButton")
            actions.addWidget(button)
        layout.addLayout(actions)
        self._sync_buttons()

    # ------------------------------------------------------------------ public

    def start(self) -> None:
        self._emit_window(self.calendar_widget.yearShown(), self.calendar_widget.monthShown())
        self._render_day()

    def populate_events(self, events: List[DisplayEvent]) -> None:
        self._events = list(events)
        self._render_day()

    # ------------------------------------------------------------------ helpers

    def _selected_day(self) -> date:
        return self.calendar_widget.selectedDate().toPyDate()

    def _selected_event(self) -> Optional[DisplayEvent]:
        item = self.event_list.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item else None

    def _events_on(self, day: date) -> List[DisplayEvent]:
        start = datetime.combine(day, time.min, tzinfo=self.tz)
        end = start + timedelta(days=1)
        return [event for event in self._events if event.start < end and event.end > start]

    def _render_day(self) -> None:
        day = self._selected_day()
        self.day_label.setText(day.strftime("%A, %d %B %Y"))
        selected = self._selected_event()
        self.event_list.clear()
        for event in self._events_on(day):
            when = "All day" if event.all_day else f"{event.start:%H:%M} - {event.end:%H:%M}"
            label = f"{when}  {event.title}"
            source = event.calendar_event
            if source is not None and source.client_name:
                label += f"  ·  {source.client_name}"
            item = QListWidgetItem(label)
            item.setData(Qt.ItemDataRole.UserRole, event)
            if source is not None:
                item.setToolTip(source.description or "")
                if source.is_placeholder:
                    item.setForeground(QColor("#94a3b8"))
            self.event_list.addItem(item)
            if selected is not None and selected.id == event.id:
                self.event_list.setCurrentItem(item)
        self._sync_buttons()

    def _sync_buttons(self) -> None:
        event = self._selected_event()
        movable = event is not None and not event.id.startswith("temp-") and self.allow(event.id)
        for button in (self.earlier_button, self.later_button, self.longer_button, self.shorter_button):
            button.setEnabled(movable)
        self.assign_button.setEnabled(event is not None and not event.id.startswith("temp-"))

    # ------------------------------------------------------------------ gestures

    def _emit_window(self, year: int, month: int) -> None:
        start, end = _month_window(year, month, self.tz)
        title = start.strftime("%B %Y")
        self.title_label.setText(title)
        self.widget_event.emit(ViewWindowChanged(start=start, end=end, view_type="month", title=title))

    def _select_day(self, qdate: QDate) -> None:
        start = datetime.combine(qdate.toPyDate(), time.min, tzinfo=self.tz)
        self.widget_event.emit(RangeSelected(start=start, end=start + timedelta(days=1), all_day=True))

    def _request_new_event(self) -> None:
        anchor = datetime.combine(self._selected_day(), time(hour=9), tzinfo=self.tz)
        self.new_event_requested.emit(anchor)

    def _activate_item(self, item: QListWidgetItem) -> None:
        event: DisplayEvent = item.data(Qt.ItemDataRole.UserRole)
        self.widget_event.emit(EventActivated(event_id=event.id))

    def _request_assignment(self) -> None:
        event = self._selected_event()
        if event is not None:
            self.assign_requested.emit(event.id)

    def _nudge(self, delta: timedelta, *, resize: bool) -> None:
        event = self._selected_event()
        if event is None or not self.allow(event.id):
            return
        start = event.start if resize else event.start + delta
        end = event.end + delta
        if end <= start:
            return

        previous = list(self._events)
        moved = DisplayEvent(
            id=event.id,
            title=event.title,
            start=start,
            end=end,
            all_day=event.all_day,
            calendar_event=event.calendar_event,
        )
        self.populate_events([moved if item.id == event.id else item for item in self._events])

        def revert() -> None:
            self.populate_events(previous)

        self.widget_event.emit(
            EventMoved(event_id=event.id, start=start, end=end, all_day=event.all_day, resized=resize, revert=revert)
        )
