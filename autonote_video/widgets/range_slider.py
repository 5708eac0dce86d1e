# autonote_video/widgets/range_slider.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from PyQt5.QtCore import Qt, QRect
from PyQt5.QtGui import QColor, QPainter
from PyQt5.QtWidgets import QSlider, QStyle, QStyleOptionSlider

from ..domain import Annotation
from ..timeutils import seconds_to_ms


DESCRIBED_COLOR = "#22C55E"   # segment has a description
EMPTY_COLOR = "#94A3B8"       # placeholder segment, not yet written
ACTIVE_COLOR = "#6366F1"      # segment under the playhead


@dataclass
class OverlayRange:
    """A translucent band on the groove, in slider value units (ms)."""
    start_value: int
    end_value: int
    color_hex: str = DESCRIBED_COLOR
    alpha: int = 120


def overlays_for_segments(segments: List[Annotation], active_id: Optional[str] = None) -> List[OverlayRange]:
    out: List[OverlayRange] = []
    for a in segments:
        if a.id == active_id:
            color, alpha = ACTIVE_COLOR, 170
        elif (a.description or "").strip():
            color, alpha = DESCRIBED_COLOR, 120
        else:
            color, alpha = EMPTY_COLOR, 70
        # 1px gap so neighbouring segments stay distinguishable
        out.append(OverlayRange(seconds_to_ms(a.start_time), max(seconds_to_ms(a.end_time) - 1, 0), color, alpha))
    return out


class RangeOverlaySlider(QSlider):
    """
    Horizontal seek slider (ms) that paints annotation segments on the groove.
    The mouse wheel is ignored so scrolling the page never moves the playhead.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._overlays: List[OverlayRange] = []

    def set_segments(self, segments: List[Annotation], active_id: Optional[str] = None) -> None:
        self.set_overlays(overlays_for_segments(segments, active_id))

    def set_overlays(self, overlays: List[OverlayRange]) -> None:
        self._overlays = list(overlays or [])
        self.update()

    def clear_overlays(self) -> None:
        self._overlays = []
        self.update()

    def wheelEvent(self, event):
        event.ignore()

    # -------------
    # Painting
    # -------------

    def _value_to_x(self, value: int, groove: QRect) -> int:
        if self.maximum() <= self.minimum():
            return groove.x()
        v = max(self.minimum(), min(int(value), self.maximum()))
        span = max(1, groove.width())
        return groove.x() + QStyle.sliderPositionFromValue(self.minimum(), self.maximum(), v, span)

    def paintEvent(self, event):
        super().paintEvent(event)
        if not self._overlays or self.maximum() <= self.minimum():
            return

        opt = QStyleOptionSlider()
        self.initStyleOption(opt)
        groove = self.style().subControlRect(QStyle.CC_Slider, opt, QStyle.SC_SliderGroove, self)
        if groove.isNull():
            return

        h = max(4, groove.height())
        y = groove.center().y() - (h // 2)

        painter = QPainter(self)
        for ov in self._overlays:
            x1 = self._value_to_x(ov.start_value, groove)
            x2 = self._value_to_x(ov.end_value, groove)
            if x2 <= x1:
                continue
            c = QColor(ov.color_hex)
            c.setAlpha(max(0, min(int(ov.alpha), 255)))
            painter.fillRect(QRect(x1, y, x2 - x1, h), c)
        painter.end()
