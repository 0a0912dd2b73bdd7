from __future__ import annotations

import logging
import sys
from typing import Optional

from PyQt6.QtWidgets import QApplication

from ..config import AppPalette, get_settings
from ..services import AuthService, ServiceContext
from ..utils.qt import TaskRunner
from .login import LoginDialog
from .main_window import MainWindow
from .styles.theme import apply_palette

logger = logging.getLogger(__name__)


def run_gui(*, email: Optional[str] = None) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    settings = get_settings()
    app.setApplicationName(settings.ui.app_name)
    app.setOrganizationName(settings.ui.organization)
    palette = AppPalette()
    apply_palette(app, palette)

    context = ServiceContext(settings=settings)
    auth = AuthService(context=context)
    runner = TaskRunner()

    login = LoginDialog(
        auth_service=auth,
        supabase_settings=settings.supabase,
        runner=runner,
        app_name=settings.ui.app_name,
        email=email,
    )
    if login.exec() != LoginDialog.DialogCode.Accepted:
        logger.info("Sign-in cancelled")
        return 1

    window = MainWindow(context=context, settings=settings, runner=runner, palette=palette)
    window.show()
    try:
        return app.exec()
    finally:
        try:
            auth.sign_out()
        except Exception as exc:  # noqa: BLE001 - exit code comes from the event loop
            logger.warning("Sign-out failed: %s", exc)
