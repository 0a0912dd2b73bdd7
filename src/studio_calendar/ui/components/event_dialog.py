from __future__ import annotations

from typing import Callable, Iterable, Optional

from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ...domain import ClientOption
from ...services import DialogMode, EventFormController


class EventDialog(QDialog):
    """Thin view over :class:`EventFormController`; every edit is forwarded to it."""

    def __init__(
        self,
        *,
        form: EventFormController,
        clients: Callable[[], Iterable[ClientOption]],
        on_assign: Optional[Callable[[], None]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.form = form
        self.clients = clients
        self.on_assign = on_assign
        self._syncing = False
        self.setModal(False)
        self.setMinimumWidth(460)

        layout = QVBoxLayout(self)
        self.heading = QLabel("")
        self.heading.setObjectName("title")
        layout.addWidget(self.heading)

        form_layout = QFormLayout()
        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Session title")
        self.title_input.textEdited.connect(self.form.set_title)
        form_layout.addRow("Title", self.title_input)

        self.all_day_box = QCheckBox("All day")
        self.all_day_box.toggled.connect(self._toggle_all_day)
        form_layout.addRow("", self.all_day_box)

        self.start_input = QLineEdit()
        self.start_input.editingFinished.connect(lambda: self._commit_boundary(self.start_input, self.form.set_start_input))
        form_layout.addRow("Start", self.start_input)

        self.end_input = QLineEdit()
        self.end_input.editingFinished.connect(lambda: self._commit_boundary(self.end_input, self.form.set_end_input))
        form_layout.addRow("End", self.end_input)

        self.client_box = QComboBox()
        self.client_box.currentIndexChanged.connect(self._client_changed)
        form_layout.addRow("Client", self.client_box)

        self.location_input = QLineEdit()
        self.location_input.setPlaceholderText("Optional location")
        self.location_input.textEdited.connect(self.form.set_location)
        form_layout.addRow("Location", self.location_input)

        self.description_input = QTextEdit()
        self.description_input.setPlaceholderText("Notes")
        self.description_input.textChanged.connect(self._description_changed)
        form_layout.addRow("Notes", self.description_input)
        layout.addLayout(form_layout)

        self.error_label = QLabel("")
        self.error_label.setObjectName("errorLabel")
        self.error_label.setWordWrap(True)
        layout.addWidget(self.error_label)

        buttons = QHBoxLayout()
        self.delete_button = QPushButton("Delete")
        self.delete_button.setObjectName("secondaryButton")
        self.delete_button.clicked.connect(self._delete)
        buttons.addWidget(self.delete_button)
        self.assign_button = QPushButton("Assign task")
        self.assign_button.setObjectName("secondaryButton")
        self.assign_button.clicked.connect(self._assign)
        buttons.addWidget(self.assign_button)
        buttons.addStretch(1)
        cancel = QPushButton("Cancel")
        cancel.setObjectName("secondaryButton")
        cancel.clicked.connect(self.reject)
        buttons.addWidget(cancel)
        self.save_button = QPushButton("Save")
        self.save_button.setDefault(True)
        self.save_button.clicked.connect(self.form.submit)
        buttons.addWidget(self.save_button)
        layout.addLayout(buttons)

    # ------------------------------------------------------------------ controller -> widgets

    def sync(self) -> None:
        form = self.form
        draft = form.draft
        self._syncing = True
        try:
            editing = form.mode is DialogMode.EDIT
            title = "Edit event" if editing else "New event"
            self.setWindowTitle(title)
            self.heading.setText("Event details" if form.read_only else title)

            if self.title_input.text() != draft.title:
                self.title_input.setText(draft.title)
            self.all_day_box.setChecked(draft.all_day)
            self.start_input.setText(form.start_input)
            self.end_input.setText(form.end_input)
            self.start_input.setPlaceholderText("YYYY-MM-DD" if draft.all_day else "YYYY-MM-DDTHH:MM")
            self.end_input.setPlaceholderText(self.start_input.placeholderText())
            if self.location_input.text() != draft.location:
                self.location_input.setText(draft.location)
            if self.description_input.toPlainText() != draft.description:
                self.description_input.setPlainText(draft.description)
            self._fill_clients(draft.client_id)

            busy = form.is_saving or form.is_deleting
            editable = not form.read_only and not busy
            for widget in (
                self.title_input,
                self.all_day_box,
                self.start_input,
                self.end_input,
                self.client_box,
                self.location_input,
                self.description_input,
            ):
                widget.setEnabled(editable)

            if form.read_only:
                self.save_button.setText("Close")
            elif form.is_saving:
                self.save_button.setText("Saving...")
            else:
                self.save_button.setText("Save changes" if editing else "Create event")
            self.save_button.setEnabled(not busy)
            self.delete_button.setVisible(editing and not form.read_only)
            self.delete_button.setEnabled(not busy)
            self.delete_button.setText("Deleting..." if form.is_deleting else "Delete")
            self.assign_button.setVisible(editing and self.on_assign is not None)

            self.error_label.setText(draft.error_message or "")
            self.error_label.setVisible(bool(draft.error_message))
        finally:
            self._syncing = False

    def _fill_clients(self, selected: str) -> None:
        self.client_box.clear()
        self.client_box.addItem("No client", "")
        for client in self.clients():
            self.client_box.addItem(client.name, client.id)
        index = self.client_box.findData(selected)
        self.client_box.setCurrentIndex(max(index, 0))

    # ------------------------------------------------------------------ widgets -> controller

    def _toggle_all_day(self, checked: bool) -> None:
        if not self._syncing:
            self.form.set_all_day(checked)

    def _commit_boundary(self, field: QLineEdit, setter: Callable[[str], bool]) -> None:
        if self._syncing:
            return
        if not setter(field.text()):
            # unparseable input snaps back to the stored value
            self.sync()

    def _client_changed(self, _index: int) -> None:
        if not self._syncing:
            self.form.set_client_id(self.client_box.currentData())

    def _description_changed(self) -> None:
        if not self._syncing:
            self.form.set_description(self.description_input.toPlainText())

    def _delete(self) -> None:
        self.form.request_delete(self._confirm)

    def _confirm(self, message: str) -> bool:
        answer = QMessageBox.question(self, "Delete event", message)
        return answer == QMessageBox.StandardButton.Yes

    def _assign(self) -> None:
        if self.on_assign is not None:
            self.on_assign()

    def reject(self) -> None:
        if self.form.is_open:
            self.form.close()
        super().reject()
