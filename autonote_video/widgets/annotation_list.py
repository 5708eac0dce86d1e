# autonote_video/widgets/annotation_list.py
from __future__ import annotations

from typing import Dict, List, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from ..domain import Annotation
from ..timeutils import format_range


class _NoteEdit(QPlainTextEdit):
    focus_changed = pyqtSignal(bool)

    def focusInEvent(self, event):
        super().focusInEvent(event)
        self.focus_changed.emit(True)

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        self.focus_changed.emit(False)


class AnnotationCard(QFrame):
    """One segment: clickable time range, description editor, polish button."""

    def __init__(self, ann: Annotation, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.annotation_id = ann.id
        self.setFrameShape(QFrame.StyledPanel)

        lay = QVBoxLayout(self)
        lay.setContentsMargins(8, 6, 8, 6)
        lay.setSpacing(4)

        top = QHBoxLayout()
        self.btn_range = QPushButton(format_range(ann.start_time, ann.end_time))
        self.btn_range.setCursor(Qt.PointingHandCursor)
        self.btn_range.setFlat(True)
        self.editing_label = QLabel("Editing...")
        self.editing_label.setVisible(False)
        top.addWidget(self.btn_range)
        top.addStretch()
        top.addWidget(self.editing_label)
        lay.addLayout(top)

        row = QHBoxLayout()
        self.edit = _NoteEdit()
        self.edit.setPlaceholderText("Describe activity...")
        self.edit.setPlainText(ann.description or "")
        self.edit.setFixedHeight(56)
        self.btn_polish = QPushButton("Polish")
        self.btn_polish.setToolTip("AI Polish Text")
        row.addWidget(self.edit, stretch=1)
        row.addWidget(self.btn_polish)
        lay.addLayout(row)

        self.set_active(False)

    def set_text(self, text: str) -> None:
        # Only touch the editor when the value differs, or the caret jumps.
        if self.edit.toPlainText() != (text or ""):
            self.edit.blockSignals(True)
            try:
                self.edit.setPlainText(text or "")
            finally:
                self.edit.blockSignals(False)

    def set_active(self, active: bool) -> None:
        border = "#6366F1" if active else "#E2E8F0"
        bg = "#EEF2FF" if active else "#FFFFFF"
        self.setStyleSheet(f"AnnotationCard {{ border: 1px solid {border}; background: {bg}; border-radius: 6px; }}")


class AnnotationList(QScrollArea):
    """
    Sidebar list of annotations, sorted by start time.

    Cards are rebuilt only when the set of annotation ids changes; text
    updates are applied in place so an editor keeps focus while typing.

    Signals:
      - seek_requested(float)
      - description_edited(str, str)     (annotation_id, text)
      - polish_requested(str)
      - focus_changed(object)            annotation_id or None
    """
    seek_requested = pyqtSignal(float)
    description_edited = pyqtSignal(str, str)
    polish_requested = pyqtSignal(str)
    focus_changed = pyqtSignal(object)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setWidgetResizable(True)

        self._container = QWidget()
        self._layout = QVBoxLayout(self._container)
        self._layout.setContentsMargins(6, 6, 6, 6)
        self._layout.setSpacing(8)
        self.setWidget(self._container)

        self._cards: Dict[str, AnnotationCard] = {}
        self._order: List[str] = []
        self._empty = QLabel("No annotations yet.\nUse the tool to generate segments.")
        self._empty.setAlignment(Qt.AlignCenter)
        self._layout.addWidget(self._empty)
        self._layout.addStretch()

        self._ai_busy = False

    # ---------------- Public API ----------------

    def set_annotations(self, annotations: List[Annotation]) -> None:
        ids = [a.id for a in annotations]
        if ids != self._order:
            self._rebuild(annotations)
        else:
            for a in annotations:
                self._cards[a.id].set_text(a.description)
        self._refresh_polish_buttons(annotations)

    def set_active(self, annotation_id: Optional[str]) -> None:
        for aid, card in self._cards.items():
            card.set_active(aid == annotation_id)

    def set_ai_busy(self, busy: bool) -> None:
        self._ai_busy = bool(busy)
        for card in self._cards.values():
            card.btn_polish.setEnabled(not self._ai_busy and bool(card.edit.toPlainText()))

    # ---------------- Internals ----------------

    def _rebuild(self, annotations: List[Annotation]) -> None:
        for card in self._cards.values():
            self._layout.removeWidget(card)
            card.deleteLater()
        self._cards.clear()
        self._order = [a.id for a in annotations]

        self._empty.setVisible(not annotations)
        insert_at = self._layout.indexOf(self._empty) + 1
        for i, a in enumerate(annotations):
            card = AnnotationCard(a)
            aid = a.id
            card.btn_range.clicked.connect(lambda _c=False, _s=a.start_time: self.seek_requested.emit(float(_s)))
            card.edit.textChanged.connect(lambda _aid=aid, _e=card.edit: self._on_text_changed(_aid, _e))
            card.edit.focus_changed.connect(lambda f, _aid=aid, _card=card: self._on_focus(_aid, _card, f))
            card.btn_polish.clicked.connect(lambda _c=False, _aid=aid: self.polish_requested.emit(_aid))
            self._layout.insertWidget(insert_at + i, card)
            self._cards[aid] = card

    def _refresh_polish_buttons(self, annotations: List[Annotation]) -> None:
        for a in annotations:
            card = self._cards.get(a.id)
            if card is not None:
                card.btn_polish.setEnabled(not self._ai_busy and bool(a.description))

    def _on_text_changed(self, annotation_id: str, edit: QPlainTextEdit) -> None:
        self.description_edited.emit(annotation_id, edit.toPlainText())

    def _on_focus(self, annotation_id: str, card: AnnotationCard, focused: bool) -> None:
        card.editing_label.setVisible(focused)
        self.focus_changed.emit(annotation_id if focused else None)
