from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QDialog, QFormLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton, QVBoxLayout

from ..config.settings import SupabaseSettings
from ..services import AuthService
from ..services.ports import Runner

logger = logging.getLogger(__name__)


class LoginDialog(QDialog):
    def __init__(
        self,
        *,
        auth_service: AuthService,
        supabase_settings: SupabaseSettings,
        runner: Runner,
        app_name: str,
        email: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.setObjectName("loginDialog")
        self.auth_service = auth_service
        self.supabase_settings = supabase_settings
        self.runner = runner

        self.setWindowTitle(f"{app_name} - Sign in")
        self.setModal(True)
        self.setMinimumWidth(380)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 20)
        layout.setSpacing(12)

        title = QLabel(f"Sign in to {app_name}")
        title.setObjectName("title")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        form = QFormLayout()
        self.email_input = QLineEdit(email or "")
        self.email_input.setPlaceholderText("you@studio.com")
        form.addRow("Email", self.email_input)
        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.password_input.returnPressed.connect(self._sign_in)
        form.addRow("Password", self.password_input)
        layout.addLayout(form)

        self.status_label = QLabel("")
        self.status_label.setObjectName("errorLabel")
        self.status_label.setWordWrap(True)
        self.status_label.hide()
        layout.addWidget(self.status_label)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        cancel = QPushButton("Cancel")
        cancel.setObjectName("secondaryButton")
        cancel.clicked.connect(self.reject)
        buttons.addWidget(cancel)
        self.sign_in_button = QPushButton("Sign in")
        self.sign_in_button.setDefault(True)
        self.sign_in_button.clicked.connect(self._sign_in)
        buttons.addWidget(self.sign_in_button)
        layout.addLayout(buttons)

        if not supabase_settings.is_configured:
            missing = ", ".join(supabase_settings.missing_env_vars)
            self._set_status(f"Supabase credentials missing. Set {missing}.")
            self.sign_in_button.setEnabled(False)
        (self.password_input if email else self.email_input).setFocus()

    def _set_status(self, message: str) -> None:
        self.status_label.setText(message)
        self.status_label.setVisible(bool(message))

    def _set_busy(self, busy: bool) -> None:
        self.sign_in_button.setEnabled(not busy)
        self.sign_in_button.setText("Signing in..." if busy else "Sign in")

    def _sign_in(self) -> None:
        email = self.email_input.text().strip()
        password = self.password_input.text()
        if not email or not password:
            self._set_status("Enter your email and password.")
            return
        self._set_status("")
        self._set_busy(True)
        self.runner.submit(
            self.auth_service.sign_in_with_password,
            email,
            password,
            on_success=self._finish_sign_in,
            on_error=self._handle_error,
        )

    def _handle_error(self, exc: Exception) -> None:
        logger.warning("Sign-in failed: %s", exc)
        self._set_busy(False)
        self._set_status(str(exc) or "Unable to sign in.")

    def _finish_sign_in(self, _response: object) -> None:
        self._set_busy(False)
        if not self.auth_service.is_signed_in():
            self._set_status("Authentication incomplete. Check your inbox for verification.")
            return
        self.accept()
