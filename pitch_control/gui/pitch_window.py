"""
Main application window: live pitch control from the microphone.
"""

import logging
import sys

from PySide6.QtCore import QSettings, Qt, QTimer
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QDoubleSpinBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..audio_source import AudioSourceError, SoundDeviceSource, list_input_devices
from ..constants import MAX_PITCH, MIN_PITCH, NEUTRAL_VALUE
from ..controller import ControllerConfig, FrameState, PitchController
from ..detection import DetectorType
from .control_meter import ControlMeter
from .styles import MAIN_WINDOW_STYLE

logger = logging.getLogger(__name__)

DETECTOR_CHOICES = [
    ("YIN", DetectorType.YIN),
    ("Autocorrelation", DetectorType.AUTOCORRELATION),
]


class PitchWindow(QMainWindow):
    """Window hosting a PitchController and showing its output."""

    DEFAULTS = {
        "min_pitch": MIN_PITCH,
        "max_pitch": MAX_PITCH,
        "detector": 0,  # Index into DETECTOR_CHOICES
        "device": None,  # None = system default input
    }

    TICK_INTERVAL_MS = 16  # ~60 Hz, one frame per tick

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Pitch Control")

        self._controller: PitchController | None = None

        self._setup_ui()
        self.setStyleSheet(MAIN_WINDOW_STYLE)
        self._load_settings()

        self._timer = QTimer()
        self._timer.timeout.connect(self._on_tick)

    def _setup_ui(self):
        """Set up the UI components."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        main_layout = QHBoxLayout(central_widget)
        main_layout.setContentsMargins(15, 15, 15, 15)
        main_layout.setSpacing(15)

        self._meter = ControlMeter(neutral=NEUTRAL_VALUE)
        main_layout.addWidget(self._meter)

        right_layout = QVBoxLayout()
        main_layout.addLayout(right_layout)

        self._value_label = QLabel(f"{NEUTRAL_VALUE:.2f}")
        self._value_label.setObjectName("valueLabel")
        self._value_label.setAlignment(Qt.AlignCenter)
        right_layout.addWidget(self._value_label)

        self._freq_label = QLabel("-- Hz")
        self._freq_label.setObjectName("frequencyLabel")
        self._freq_label.setAlignment(Qt.AlignCenter)
        right_layout.addWidget(self._freq_label)

        form = QFormLayout()
        right_layout.addLayout(form)

        self._input_combo = QComboBox()
        self._populate_audio_devices()
        form.addRow("Input:", self._input_combo)

        self._detector_combo = QComboBox()
        for name, _ in DETECTOR_CHOICES:
            self._detector_combo.addItem(name)
        form.addRow("Detector:", self._detector_combo)

        self._min_spinbox = QDoubleSpinBox()
        self._min_spinbox.setRange(40.0, 2000.0)
        self._min_spinbox.setSuffix(" Hz")
        form.addRow("Low pitch:", self._min_spinbox)

        self._max_spinbox = QDoubleSpinBox()
        self._max_spinbox.setRange(40.0, 2000.0)
        self._max_spinbox.setSuffix(" Hz")
        form.addRow("High pitch:", self._max_spinbox)

        self._start_button = QPushButton("Start")
        self._start_button.setCheckable(True)
        self._start_button.toggled.connect(self._on_start_toggled)
        right_layout.addWidget(self._start_button)

        self._status_label = QLabel("Stopped")
        self._status_label.setObjectName("statusLabel")
        right_layout.addWidget(self._status_label)

        right_layout.addStretch()

    def _populate_audio_devices(self):
        """Populate the audio input device combo box."""
        self._input_combo.clear()
        self._input_combo.addItem("Default", None)
        try:
            for index, name in list_input_devices():
                self._input_combo.addItem(name, index)
        except AudioSourceError as e:
            logger.warning("%s", e)

    def _set_settings_enabled(self, enabled: bool):
        for widget in (self._input_combo, self._detector_combo, self._min_spinbox, self._max_spinbox):
            widget.setEnabled(enabled)

    def _on_start_toggled(self, checked: bool):
        if checked:
            self._start()
        else:
            self._stop()

    def _start(self):
        """Build a controller from the current settings and start it."""
        try:
            config = ControllerConfig(
                min_pitch=self._min_spinbox.value(),
                max_pitch=self._max_spinbox.value(),
                detector_type=DETECTOR_CHOICES[self._detector_combo.currentIndex()][1],
            )
        except ValueError as e:
            self._status_label.setText(f"Invalid settings: {e}")
            self._start_button.setChecked(False)
            return

        source = SoundDeviceSource(device=self._input_combo.currentData(), frame_size=config.frame_size)
        self._controller = PitchController(source, on_value=self._on_value, config=config)

        try:
            self._controller.start()
        except AudioSourceError as e:
            self._controller = None
            self._status_label.setText("Microphone unavailable")
            QMessageBox.warning(
                self,
                "Microphone",
                f"Cannot access the microphone. Allow access and try again.\n\n{e}",
            )
            self._start_button.blockSignals(True)
            self._start_button.setChecked(False)
            self._start_button.blockSignals(False)
            return

        self._set_settings_enabled(False)
        self._start_button.setText("Stop")
        self._status_label.setText("Listening...")
        self._timer.start(self.TICK_INTERVAL_MS)

    def _stop(self):
        """Stop the timer and release the microphone."""
        self._timer.stop()
        if self._controller is not None:
            self._controller.stop()
            self._controller = None
        self._meter.set_inactive()
        self._value_label.setText(f"{NEUTRAL_VALUE:.2f}")
        self._freq_label.setText("-- Hz")
        self._set_settings_enabled(True)
        self._start_button.setText("Start")
        self._status_label.setText("Stopped")

    def _on_tick(self):
        if self._controller is not None:
            self._controller.tick()

    def _on_value(self, value: float):
        """Controller observer - update the display."""
        state = self._controller.state
        self._meter.set_value(value, state.frame_state.value)
        self._value_label.setText(f"{value:.2f}")

        estimate = state.last_estimate
        if state.frame_state == FrameState.VOICED and estimate is not None:
            if estimate.confidence is not None:
                self._freq_label.setText(f"{estimate.frequency:.1f} Hz ({estimate.confidence:.0%})")
            else:
                self._freq_label.setText(f"{estimate.frequency:.1f} Hz")
        elif state.frame_state == FrameState.HELD:
            self._freq_label.setText(f"{state.last_frequency:.1f} Hz (held)")
        else:
            self._freq_label.setText("-- Hz")

    def closeEvent(self, event):
        """Handle window close."""
        self._save_settings()
        self._stop()
        event.accept()

    def _load_settings(self):
        """Load saved settings from QSettings."""
        settings = QSettings("pitch-control", "PitchControl")

        self._min_spinbox.setValue(settings.value("min_pitch", self.DEFAULTS["min_pitch"], type=float))
        self._max_spinbox.setValue(settings.value("max_pitch", self.DEFAULTS["max_pitch"], type=float))

        detector = settings.value("detector", self.DEFAULTS["detector"], type=int)
        if 0 <= detector < len(DETECTOR_CHOICES):
            self._detector_combo.setCurrentIndex(detector)

        device = settings.value("device", self.DEFAULTS["device"])
        if device is not None:
            index = self._input_combo.findData(int(device))
            if index >= 0:
                self._input_combo.setCurrentIndex(index)

    def _save_settings(self):
        """Save current settings to QSettings."""
        settings = QSettings("pitch-control", "PitchControl")
        settings.setValue("min_pitch", self._min_spinbox.value())
        settings.setValue("max_pitch", self._max_spinbox.value())
        settings.setValue("detector", self._detector_combo.currentIndex())
        device = self._input_combo.currentData()
        if device is None:
            settings.remove("device")
        else:
            settings.setValue("device", device)


def main():
    """Main entry point for the pitch control GUI."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    window = PitchWindow()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
