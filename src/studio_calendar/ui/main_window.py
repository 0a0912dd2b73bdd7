from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from PyQt6.QtWidgets import QMainWindow, QVBoxLayout, QWidget

from ..config import AppPalette
from ..config.settings import AppSettings
from ..services import CalendarViewController, DisplayEvent, EventFormController, ServiceContext, TaskAssignmentBridge
from ..services.ports import Runner
from .components.assign_task_dialog import AssignTaskDialog
from .components.calendar_panel import CalendarPanel
from .components.event_dialog import EventDialog
from .components.toast import ToastBanner



class MainWindow(QMainWindow):
    def __init__(self, *, context: ServiceContext, settings: AppSettings, runner: Runner, palette: Optional[AppPalette] = None) -> None:
        super().__init__()
        self.settings = settings
        self.view = CalendarViewController(
            events=context.events,
            clients=context.clients,
            users=context.users,
            tasks=context.tasks,
            runner=runner,
            settings=settings.calendar,
            cache=context.cache,
        )

        self.setWindowTitle(f"{settings.ui.app_name} - {settings.ui.organization}")
        self.resize(980, 760)

        self.toast = ToastBanner(palette=palette or AppPalette(), timeout_ms=settings.calendar.toast_timeout_ms)
        self.calendar_panel = CalendarPanel(tz=self.view.tz)
        self.calendar_panel.allow = self.view.allow

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.toast)
        layout.addWidget(self.calendar_panel, stretch=1)
        self.setCentralWidget(central)

        self.event_dialog = EventDialog(
            form=self.view.form,
            clients=lambda: self.view.client_options,
            on_assign=self.view.open_assignment,
            parent=self,
        )
        self.assign_dialog = AssignTaskDialog(bridge=self.view.assignment, parent=self)

        self.view.on_events_changed = self._render_events
        self.view.on_toast = self.toast.show_toast
        self.view.on_state_changed = self._update_status
        self.view.form.on_change = self._form_changed
        self.view.assignment.on_change = self._assignment_changed
        self.toast.dismissed.connect(self.view.dismiss_toast)

        self.calendar_panel.widget_event.connect(self.view.handle)
        self.calendar_panel.new_event_requested.connect(self._new_event)
        self.calendar_panel.assign_requested.connect(self.view.open_assignment)
        self.calendar_panel.refresh_requested.connect(self.view.refresh)

        self.statusBar().showMessage("Loading calendar...")
        self.view.start()
        self.calendar_panel.start()

    # ------------------------------------------------------------------ controller callbacks

    def _render_events(self, events: List[DisplayEvent]) -> None:
        self.calendar_panel.populate_events(events)

    def _update_status(self, view: CalendarViewController) -> None:
        if view.load_error:
            self.statusBar().showMessage(view.load_error)
        elif view.is_loading:
            self.statusBar().showMessage("Loading events...")
        elif view.pending_count:
            self.statusBar().showMessage(f"Saving {view.pending_count} change(s)...")
        else:
            user = view.current_user
            who = (user.name or user.email or user.id) if user else "Not signed in"
            self.statusBar().showMessage(f"{view.view_title}  ·  {who}")

    def _form_changed(self, form: EventFormController) -> None:
        if form.is_open:
            self.event_dialog.sync()
            if not self.event_dialog.isVisible():
                self.event_dialog.show()
                self.event_dialog.raise_()
        elif self.event_dialog.isVisible():
            self.event_dialog.hide()

    def _assignment_changed(self, bridge: TaskAssignmentBridge) -> None:
        if bridge.is_open:
            self.assign_dialog.sync()
            if not self.assign_dialog.isVisible():
                self.assign_dialog.show()
                self.assign_dialog.raise_()
        elif self.assign_dialog.isVisible():
            self.assign_dialog.hide()

    def _new_event(self, anchor: Optional[datetime]) -> None:
        self.view.new_event(anchor)
