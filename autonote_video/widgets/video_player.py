# autonote_video/widgets/video_player.py
from __future__ import annotations

from typing import List, Optional

from PyQt5.QtCore import Qt, QUrl, pyqtSignal, QSize
from PyQt5.QtMultimedia import QMediaContent, QMediaPlayer
from PyQt5.QtMultimediaWidgets import QVideoWidget
from PyQt5.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from ..domain import Annotation
from ..timeutils import ms_to_seconds, ms_to_time_str, seconds_to_ms
from .range_slider import RangeOverlaySlider


class VideoPlayer(QWidget):
    """
    One QMediaPlayer + QVideoWidget with play/pause and a seek slider.

    Times cross the public API in seconds; the slider works in ms.

    Signals:
      - position_changed(float)   current playback time (s)
      - duration_changed(float)   media duration (s), 0 until metadata loads
    """
    position_changed = pyqtSignal(float)
    duration_changed = pyqtSignal(float)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)

        self.video = QVideoWidget()
        self.video.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.video.setStyleSheet("background-color: black;")

        self.player = QMediaPlayer(None, QMediaPlayer.VideoSurface)
        self.player.setVideoOutput(self.video)
        self.player.positionChanged.connect(self._on_position)
        self.player.durationChanged.connect(self._on_duration)
        self.player.stateChanged.connect(lambda _s: self._update_buttons())

        # Scrub guard: ignore player position echoes while the user drags
        self._user_scrubbing = False

        self._build_ui()
        self._update_buttons()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        layout.addWidget(self.video, stretch=1)

        self.slider = RangeOverlaySlider(Qt.Horizontal)
        self.slider.setRange(0, 0)
        self.slider.sliderPressed.connect(self._on_slider_pressed)
        self.slider.sliderReleased.connect(self._on_slider_released)
        layout.addWidget(self.slider)

        bar = QHBoxLayout()
        bar.setSpacing(8)
        self.btn_play = QPushButton("Play")
        self.btn_pause = QPushButton("Pause")
        self.btn_play.clicked.connect(self.play)
        self.btn_pause.clicked.connect(self.pause)
        self.time_label = QLabel("00:00 / 00:00")
        bar.addWidget(self.btn_play)
        bar.addWidget(self.btn_pause)
        bar.addSpacing(12)
        bar.addWidget(self.time_label)
        bar.addStretch()
        layout.addLayout(bar)

    def sizeHint(self) -> QSize:
        return QSize(960, 600)

    # ---------------- Public API ----------------

    def load(self, url: str) -> None:
        self.player.stop()
        if url:
            self.player.setMedia(QMediaContent(QUrl(url)))
        else:
            self.player.setMedia(QMediaContent())
        self.slider.setRange(0, 0)
        self.slider.setValue(0)
        self._update_label(0, 0)

    def clear(self) -> None:
        self.player.stop()
        self.player.setMedia(QMediaContent())
        self.slider.clear_overlays()

    def is_playing(self) -> bool:
        return self.player.state() == QMediaPlayer.PlayingState

    def play(self) -> None:
        self.player.play()

    def pause(self) -> None:
        self.player.pause()

    def seek_and_play(self, seconds: float) -> None:
        self.player.setPosition(seconds_to_ms(seconds))
        self.player.play()

    def set_segments(self, segments: List[Annotation], active_id: Optional[str] = None) -> None:
        self.slider.set_segments(segments, active_id)

    # ---------------- Player signals ----------------

    def _on_position(self, pos_ms: int) -> None:
        if not self._user_scrubbing:
            self.slider.blockSignals(True)
            try:
                self.slider.setValue(int(pos_ms))
            finally:
                self.slider.blockSignals(False)
        self._update_label(pos_ms, self.player.duration())
        self.position_changed.emit(ms_to_seconds(pos_ms))

    def _on_duration(self, dur_ms: int) -> None:
        self.slider.setRange(0, max(0, int(dur_ms)))
        self._update_label(self.player.position(), dur_ms)
        self.duration_changed.emit(ms_to_seconds(dur_ms))

    # ---------------- Scrubbing ----------------

    def _on_slider_pressed(self) -> None:
        self._user_scrubbing = True

    def _on_slider_released(self) -> None:
        self._user_scrubbing = False
        self.player.setPosition(int(self.slider.value()))

    def _update_label(self, pos_ms: int, dur_ms: int) -> None:
        self.time_label.setText(f"{ms_to_time_str(pos_ms)} / {ms_to_time_str(dur_ms)}")

    def _update_buttons(self) -> None:
        playing = self.is_playing()
        self.btn_play.setEnabled(not playing)
        self.btn_pause.setEnabled(playing)
