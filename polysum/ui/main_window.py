from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from PySide6.QtCore import Qt, QElapsedTimer, QTimer
from PySide6.QtGui import QCloseEvent, QColor
from PySide6.QtWidgets import (
    QFrame,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from polysum.core.game import FeedbackSink, GameSession
from polysum.core.rounds import Entity
from polysum.ui.canvas import GoalBadge, ShapeCanvas
from polysum.ui.colors import GameColors
from polysum.ui.models import FeedbackMessage, SelectionView, goal_caption

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16
FEEDBACK_VISIBLE_MS = 1000


class GlassCard(QFrame):
    """Translucent rounded card with a soft shadow."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("glassCard")
        self.setStyleSheet(
            f"""
            QFrame#glassCard {{
                background: {GameColors.CARD_BG};
                border: 1px solid {GameColors.CARD_BORDER};
                border-radius: 18px;
            }}
            """
        )
        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(24)
        shadow.setOffset(0, 6)
        shadow.setColor(QColor(15, 23, 42, 60))
        self.setGraphicsEffect(shadow)


class MainWindow(QMainWindow, FeedbackSink):
    """Game window: goal header, selection strip, score, play area and controls.

    Implements :class:`FeedbackSink` so the session can push events straight
    into the widgets.
    """

    def __init__(self, session: GameSession) -> None:
        super().__init__()
        self._session = session
        self._goal_badge: Optional[GoalBadge] = None
        self._goal_label: Optional[QLabel] = None
        self._first_label: Optional[QLabel] = None
        self._second_label: Optional[QLabel] = None
        self._sum_label: Optional[QLabel] = None
        self._score_label: Optional[QLabel] = None
        self._best_label: Optional[QLabel] = None
        self._feedback_label: Optional[QLabel] = None
        self._canvas: Optional[ShapeCanvas] = None

        self._build_ui()
        session.set_feedback(self)

        self._frame_clock = QElapsedTimer()
        self._frame_clock.start()
        self._frame_timer = QTimer(self)
        self._frame_timer.timeout.connect(self._on_frame)
        self._frame_timer.start(FRAME_INTERVAL_MS)

        self._feedback_timer = QTimer(self)
        self._feedback_timer.setSingleShot(True)
        self._feedback_timer.timeout.connect(self._hide_feedback)

    def _build_ui(self) -> None:
        """Construct the widget tree."""
        self.setWindowTitle("Polysum - Shape Math")
        self.setStyleSheet(f"QMainWindow {{ background: {GameColors.BG_TOP}; }}")

        root = QWidget()
        layout = QVBoxLayout(root)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(14)

        header = GlassCard()
        header_row = QHBoxLayout(header)
        header_row.setContentsMargins(18, 12, 18, 12)
        header_row.setSpacing(16)

        self._goal_badge = GoalBadge()
        header_row.addWidget(self._goal_badge, 0)

        goal_col = QVBoxLayout()
        goal_heading = QLabel("GOAL")
        goal_heading.setStyleSheet(
            f"color: {GameColors.TEXT_MUTED}; font-size: 12px; letter-spacing: 4px; font-weight: 700;"
        )
        self._goal_label = QLabel("?")
        self._goal_label.setStyleSheet(f"color: {GameColors.PRIMARY}; font-size: 28px; font-weight: 900;")
        goal_col.addWidget(goal_heading)
        goal_col.addWidget(self._goal_label)
        header_row.addLayout(goal_col, 1)

        self._first_label = self._equation_label()
        self._second_label = self._equation_label()
        self._sum_label = self._equation_label()
        for widget in (
            self._first_label,
            self._operator_label("+"),
            self._second_label,
            self._operator_label("="),
            self._sum_label,
        ):
            header_row.addWidget(widget, 0)
        header_row.addStretch(1)

        score_col = QVBoxLayout()
        self._score_label = QLabel()
        self._score_label.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 18px; font-weight: 800;")
        self._best_label = QLabel()
        self._best_label.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 14px; font-weight: 600;")
        score_col.addWidget(self._score_label)
        score_col.addWidget(self._best_label)
        header_row.addLayout(score_col, 0)
        layout.addWidget(header, 0)

        self._canvas = ShapeCanvas(self._session)
        layout.addWidget(self._canvas, 1)

        self._feedback_label = QLabel("")
        self._feedback_label.setAlignment(Qt.AlignCenter)
        self._feedback_label.setFixedHeight(32)
        layout.addWidget(self._feedback_label, 0)

        controls = QHBoxLayout()
        controls.addStretch(1)
        new_game_button = self._button("New game", GameColors.PRIMARY)
        new_game_button.clicked.connect(self._session.new_game)
        hint_button = self._button("Hint", GameColors.HINT_GLOW)
        hint_button.clicked.connect(self._session.request_hint)
        controls.addWidget(new_game_button)
        controls.addWidget(hint_button)
        controls.addStretch(1)
        layout.addLayout(controls)

        self.setCentralWidget(root)
        self.on_score_changed(self._session.score.current, self._session.score.best)

    @staticmethod
    def _equation_label() -> QLabel:
        label = QLabel("?")
        label.setAlignment(Qt.AlignCenter)
        label.setMinimumWidth(56)
        label.setStyleSheet(
            f"color: {GameColors.TEXT_PRIMARY}; background: white; border-radius: 10px;"
            " padding: 6px 10px; font-size: 20px; font-weight: 800;"
        )
        return label

    @staticmethod
    def _operator_label(text: str) -> QLabel:
        label = QLabel(text)
        label.setStyleSheet(f"color: {GameColors.TEXT_MUTED}; font-size: 20px; font-weight: 800;")
        return label

    @staticmethod
    def _button(text: str, color: str) -> QPushButton:
        button = QPushButton(text)
        button.setCursor(Qt.PointingHandCursor)
        button.setStyleSheet(
            f"""
            QPushButton {{
                background: {color};
                color: white;
                border: none;
                border-radius: 14px;
                padding: 10px 26px;
                font-size: 15px;
                font-weight: 800;
            }}
            """
        )
        return button

    def _on_frame(self) -> None:
        dt = self._frame_clock.restart() / 1000.0
        self._session.tick(dt)
        if self._canvas is not None:
            self._canvas.update()

    def _show_feedback(self, message: FeedbackMessage) -> None:
        color = GameColors.CORRECT if message.positive else GameColors.INCORRECT
        self._feedback_label.setText(message.text)
        self._feedback_label.setStyleSheet(f"color: {color}; font-size: 18px; font-weight: 900;")
        self._feedback_timer.start(FEEDBACK_VISIBLE_MS)

    def _hide_feedback(self) -> None:
        self._feedback_label.setText("")

    def _set_sum_color(self, color: Optional[str]) -> None:
        border = f"border: 2px solid {color};" if color else ""
        self._sum_label.setStyleSheet(
            f"color: {GameColors.TEXT_PRIMARY}; background: white; border-radius: 10px;"
            f" padding: 6px 10px; font-size: 20px; font-weight: 800; {border}"
        )

    # FeedbackSink

    def on_new_round(self, goal: int) -> None:
        self._goal_badge.set_goal(goal)
        self._goal_label.setText(goal_caption(goal))

    def on_selection_changed(self, values: List[int]) -> None:
        view = SelectionView.from_values(values)
        self._first_label.setText(view.first)
        self._second_label.setText(view.second)
        self._sum_label.setText(view.total)
        self._set_sum_color(None)

    def on_match(self, total: int) -> None:
        self._set_sum_color(GameColors.CORRECT)
        self._show_feedback(FeedbackMessage.for_match(total))

    def on_mismatch(self, total: int) -> None:
        self._set_sum_color(GameColors.INCORRECT)
        self._show_feedback(FeedbackMessage.for_mismatch(total))

    def on_hint(self, pair: Tuple[Entity, Entity]) -> None:
        logger.debug("Hint: %d + %d", pair[0].value, pair[1].value)

    def on_score_changed(self, current: int, best: int) -> None:
        self._score_label.setText(f"Score: {current}")
        self._best_label.setText(f"Best: {best}")

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop timers and drop pending game callbacks when closing."""
        self._frame_timer.stop()
        self._session.shutdown()
        super().closeEvent(event)
