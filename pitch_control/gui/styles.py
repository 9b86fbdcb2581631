"""
Colors and stylesheets shared by the GUI widgets.
"""

WINDOW_BACKGROUND = "#1e1e1e"
PANEL_BACKGROUND = "#2b2b2b"
METER_BACKGROUND = "#151515"
BORDER_COLOR = "#444444"
TEXT_PRIMARY = "#f0f0f0"
TEXT_SECONDARY = "#9a9a9a"
ACCENT_GREEN = "#4caf50"
ACCENT_BLUE = "#42a5f5"
WARNING_ORANGE = "#ff9800"

MAIN_WINDOW_STYLE = f"""
    QMainWindow, QWidget {{
        background-color: {WINDOW_BACKGROUND};
        color: {TEXT_PRIMARY};
    }}
    QLabel#valueLabel {{
        font-size: 32px;
        font-weight: bold;
    }}
    QLabel#frequencyLabel, QLabel#statusLabel {{
        font-size: 13px;
        color: {TEXT_SECONDARY};
    }}
    QComboBox, QDoubleSpinBox {{
        background-color: {PANEL_BACKGROUND};
        border: 1px solid {BORDER_COLOR};
        border-radius: 4px;
        padding: 3px 6px;
    }}
    QPushButton {{
        background-color: {PANEL_BACKGROUND};
        border: 1px solid {BORDER_COLOR};
        border-radius: 4px;
        padding: 6px 18px;
    }}
    QPushButton:checked {{
        background-color: {ACCENT_GREEN};
        color: {WINDOW_BACKGROUND};
    }}
"""
