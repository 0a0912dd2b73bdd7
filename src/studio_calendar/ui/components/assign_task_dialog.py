from __future__ import annotations

from typing import Optional

from PyQt6.QtWidgets import (
    QComboBox,
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ...domain import TaskPriority
from ...services import TaskAssignmentBridge


class AssignTaskDialog(QDialog):
    def __init__(self, *, bridge: TaskAssignmentBridge, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.bridge = bridge
        self._syncing = False
        self.setWindowTitle("Assign task")
        self.setModal(False)
        self.setMinimumWidth(420)

        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("What needs doing?")
        self.title_input.textEdited.connect(lambda text: self._update(title=text))
        form.addRow("Title", self.title_input)

        self.details_input = QTextEdit()
        self.details_input.textChanged.connect(lambda: self._update(details=self.details_input.toPlainText()))
        form.addRow("Details", self.details_input)

        self.due_input = QLineEdit()
        self.due_input.setPlaceholderText("YYYY-MM-DD HH:MM (optional)")
        self.due_input.textEdited.connect(lambda text: self._update(due_at=text))
        form.addRow("Due", self.due_input)

        self.priority_box = QComboBox()
        for priority in TaskPriority:
            self.priority_box.addItem(priority.value.title(), priority.value)
        self.priority_box.currentIndexChanged.connect(lambda _i: self._update(priority=self.priority_box.currentData()))
        form.addRow("Priority", self.priority_box)

        assignee_row = QHBoxLayout()
        self.assignee_box = QComboBox()
        self.assignee_box.currentIndexChanged.connect(lambda _i: self._update(assignee_id=self.assignee_box.currentData() or ""))
        assignee_row.addWidget(self.assignee_box, stretch=1)
        self.me_button = QPushButton("Assign to me")
        self.me_button.setObjectName("secondaryButton")
        self.me_button.clicked.connect(self.bridge.assign_to_me)
        assignee_row.addWidget(self.me_button)
        form.addRow("Assignee", assignee_row)
        layout.addLayout(form)

        self.error_label = QLabel("")
        self.error_label.setObjectName("errorLabel")
        self.error_label.setWordWrap(True)
        layout.addWidget(self.error_label)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        cancel = QPushButton("Cancel")
        cancel.setObjectName("secondaryButton")
        cancel.clicked.connect(self.reject)
        buttons.addWidget(cancel)
        self.submit_button = QPushButton("Assign task")
        self.submit_button.clicked.connect(self.bridge.submit)
        buttons.addWidget(self.submit_button)
        layout.addLayout(buttons)

    def _update(self, **changes: object) -> None:
        if not self._syncing:
            self.bridge.update(**changes)

    def sync(self) -> None:
        bridge = self.bridge
        draft = bridge.draft
        self._syncing = True
        try:
            if self.title_input.text() != draft.title:
                self.title_input.setText(draft.title)
            if self.details_input.toPlainText() != draft.details:
                self.details_input.setPlainText(draft.details)
            if self.due_input.text() != draft.due_at:
                self.due_input.setText(draft.due_at)
            self.priority_box.setCurrentIndex(max(self.priority_box.findData(TaskPriority(draft.priority).value), 0))

            self.assignee_box.clear()
            self.assignee_box.addItem("Select a teammate", "")
            for user in bridge.user_options:
                self.assignee_box.addItem(user.label, user.id)
            self.assignee_box.setCurrentIndex(max(self.assignee_box.findData(draft.assignee_id), 0))

            self.me_button.setEnabled(bool(bridge.current_user_id))
            self.submit_button.setEnabled(not bridge.is_submitting)
            self.submit_button.setText("Assigning..." if bridge.is_submitting else "Assign task")
            message = draft.error_message or bridge.users_error or ""
            self.error_label.setText(message)
            self.error_label.setVisible(bool(message))
        finally:
            self._syncing = False

    def reject(self) -> None:
        if self.bridge.is_open:
            self.bridge.close()
        super().reject()
