from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AppPalette:
    background_primary: str = "#f8fafc"
    background_secondary: str = "#ffffff"
    surface: str = "#f1f5f9"
    accent_primary: str = "#0f172a"
    accent_secondary: str = "#6366f1"
    accent_success: str = "#059669"
    accent_error: str = "#e11d48"
    text_primary: str = "#0f172a"
    text_secondary: str = "#64748b"
    border_subtle: str = "#e2e8f0"
    border_strong: str = "#cbd5e1"

    def toast_colors(self, variant: str) -> tuple[str, str]:
        """Return ``(border, text)`` colours for a toast of ``variant``."""

        if variant == "success":
            return self.accent_success, self.accent_success
        return self.accent_error, self.accent_error

    def as_stylesheet(self) -> str:
        """Global stylesheet applied to the studio calendar window and dialogs."""

        return f"""
        QWidget {{
            background-color: {self.background_primary};
            color: {self.text_primary};
            font-family: 'Helvetica Neue', 'Segoe UI', Arial, sans-serif;
            font-size: 14px;
        }}
        QPushButton {{
            background-color: {self.accent_primary};
            color: {self.background_secondary};
            border: none;
            padding: 8px 14px;
            border-radius: 8px;
            font-weight: 600;
        }}
        QPushButton:disabled {{
            background-color: {self.border_subtle};
            color: {self.text_secondary};
        }}
        QPushButton#secondaryButton {{
            background-color: transparent;
            color: {self.accent_primary};
            border: 1px solid {self.border_strong};
        }}
        QLineEdit, QTextEdit, QComboBox, QDateTimeEdit {{
            background-color: {self.background_secondary};
            border: 1px solid {self.border_strong};
            border-radius: 6px;
            padding: 6px 8px;
        }}
        QLineEdit:focus, QTextEdit:focus, QComboBox:focus {{
            border-color: {self.accent_secondary};
        }}
        QLabel#title {{
            font-size: 18px;
            font-weight: 700;
        }}
        QLabel#hint {{
            color: {self.text_secondary};
            font-size: 12px;
        }}
        QLabel#errorLabel {{
            color: {self.accent_error};
            font-size: 12px;
        }}
        QWidget#calendarPanel {{
            background-color: {self.surface};
        }}
        QListView {{
            background-color: {self.background_secondary};
            border: 1px solid {self.border_strong};
            selection-background-color: rgba(99, 102, 241, 0.18);
            selection-color: {self.text_primary};
        }}
        """
