"""
Control meter widget - vertical bar showing the current control value.
"""

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen
from PySide6.QtWidgets import QWidget

from .styles import (
    ACCENT_BLUE,
    ACCENT_GREEN,
    BORDER_COLOR,
    METER_BACKGROUND,
    PANEL_BACKGROUND,
    TEXT_SECONDARY,
    WARNING_ORANGE,
)


class ControlMeter(QWidget):
    """
    Vertical meter for a control value in [0, 1].

    Displays:
    - A marker at the current value (0 at the bottom, 1 at the top)
    - A dashed line at the neutral position
    - Marker color by controller state: green (voiced), orange (held),
      gray (fallback/inactive)
    """

    def __init__(self, neutral: float = 0.5, parent=None):
        super().__init__(parent)
        self._value = neutral
        self._neutral = neutral
        self._color = QColor(TEXT_SECONDARY)
        self._active = False

        self.setMinimumSize(60, 240)
        self.setMaximumWidth(90)

    def set_value(self, value: float, state: str = "voiced"):
        """
        Set the displayed value.

        Args:
            value: Control value (0.0 to 1.0)
            state: Controller frame state name ("voiced", "held", "fallback")
        """
        self._value = max(0.0, min(1.0, value))
        if state == "voiced":
            self._color = QColor(ACCENT_GREEN)
        elif state == "held":
            self._color = QColor(WARNING_ORANGE)
        else:
            self._color = QColor(TEXT_SECONDARY)
        self._active = True
        self.update()

    def set_inactive(self):
        """Set meter to inactive state (controller stopped)."""
        self._active = False
        self._value = self._neutral
        self.update()

    def paintEvent(self, event):
        """Paint the meter."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        margin = 4
        bar_x = margin
        bar_y = margin
        bar_width = self.width() - 2 * margin
        bar_height = self.height() - 2 * margin

        painter.setPen(QPen(QColor(BORDER_COLOR), 1))
        painter.setBrush(QBrush(QColor(PANEL_BACKGROUND)))
        painter.drawRoundedRect(bar_x, bar_y, bar_width, bar_height, 4, 4)

        inner_margin = 3
        inner_x = bar_x + inner_margin
        inner_y = bar_y + inner_margin
        inner_width = bar_width - 2 * inner_margin
        inner_height = bar_height - 2 * inner_margin

        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(QColor(METER_BACKGROUND)))
        painter.drawRect(int(inner_x), int(inner_y), int(inner_width), int(inner_height))

        # Neutral line
        neutral_y = inner_y + inner_height - int(inner_height * self._neutral)
        painter.setPen(QPen(QColor(ACCENT_BLUE), 1, Qt.DashLine))
        painter.drawLine(int(inner_x), int(neutral_y), int(inner_x + inner_width), int(neutral_y))

        if not self._active:
            return

        marker_height = 8
        marker_y = inner_y + inner_height - int(inner_height * self._value) - marker_height // 2
        marker_y = max(inner_y, min(inner_y + inner_height - marker_height, marker_y))
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(self._color))
        painter.drawRoundedRect(int(inner_x), int(marker_y), int(inner_width), marker_height, 3, 3)
