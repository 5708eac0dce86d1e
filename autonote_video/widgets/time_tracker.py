# autonote_video/widgets/time_tracker.py
from __future__ import annotations

from typing import Optional

from PyQt5.QtWidgets import QHBoxLayout, QLabel, QWidget

from ..timeutils import format_hms


class TimeTrackerBadge(QWidget):
    """HH:MM:SS readout with a Tracking / Paused indicator. Display only."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        lay = QHBoxLayout(self)
        lay.setContentsMargins(10, 4, 10, 4)
        lay.setSpacing(8)
        self.time_label = QLabel(format_hms(0))
        self.time_label.setStyleSheet("font-family: monospace; font-size: 16px; font-weight: 600;")
        self.state_label = QLabel()
        lay.addWidget(self.time_label)
        lay.addWidget(self.state_label)
        self.set_state(0, False)

    def set_state(self, total_seconds: int, active: bool) -> None:
        self.time_label.setText(format_hms(total_seconds))
        if active:
            self.state_label.setText("● TRACKING")
            self.setStyleSheet("TimeTrackerBadge { background: #F0FDF4; } QLabel { color: #15803D; }")
        else:
            self.state_label.setText("● PAUSED")
            self.setStyleSheet("TimeTrackerBadge { background: #F1F5F9; } QLabel { color: #64748B; }")
