"""Play area: paints the floating shapes and turns clicks into picks."""

from __future__ import annotations

import math
from typing import Optional

from PySide6.QtCore import Qt, QPointF
from PySide6.QtGui import QColor, QLinearGradient, QPainter, QPen, QPolygonF
from PySide6.QtWidgets import QSizePolicy, QWidget

from polysum.core.game import GameSession
from polysum.core.motion import Body
from polysum.core.rounds import Entity
from polysum.core.shapes import MAX_DRAWN_SIDES, polygon_points
from polysum.ui.colors import GameColors, blend_hex, goal_color, shape_color

PULSE_AMPLITUDE = 3.0


def _polygon(cx: float, cy: float, sides: int, radius: float, rotation: float) -> QPolygonF:
    return QPolygonF([QPointF(cx + x, cy + y) for x, y in polygon_points(sides, radius, rotation)])


class ShapeCanvas(QWidget):
    """Renders ``session.entities`` at their body positions every frame."""

    def __init__(self, session: GameSession, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._session = session
        bounds = session.bounds
        self.setMinimumSize(int(bounds.width), int(bounds.height))
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setCursor(Qt.PointingHandCursor)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._session.resize(self.width(), self.height())

    def mousePressEvent(self, event) -> None:
        pos = event.position()
        entity_id = self._session.entity_at(pos.x(), pos.y())
        if entity_id is None:
            self._session.dismiss_hint()
        else:
            self._session.handle_pick(entity_id)
        self.update()
        super().mousePressEvent(event)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        gradient = QLinearGradient(0, 0, 0, self.height())
        gradient.setColorAt(0.0, QColor(GameColors.BG_TOP))
        gradient.setColorAt(1.0, QColor(GameColors.BG_BOTTOM))
        painter.fillRect(self.rect(), gradient)

        bodies = self._session.bodies
        for entity in self._session.entities:
            body = bodies.get(entity.id)
            if body is not None:
                self._draw_entity(painter, entity, body)

    def _draw_entity(self, painter: QPainter, entity: Entity, body: Body) -> None:
        size = body.radius
        if entity.selected or entity.hinted:
            size += math.sin(body.pulse_phase) * PULSE_AMPLITUDE
        base = shape_color(entity.value)

        if entity.selected or entity.hinted:
            glow = GameColors.SELECTION_GLOW if entity.selected else GameColors.HINT_GLOW
            halo = QColor(glow)
            halo.setAlpha(90)
            painter.setPen(Qt.NoPen)
            painter.setBrush(halo)
            painter.drawPolygon(_polygon(body.x, body.y, entity.value, size + 8, body.rotation))

        fill = blend_hex(base, "#FFFFFF", 0.15) if entity.selected else base
        painter.setBrush(QColor(fill))
        if entity.selected:
            painter.setPen(QPen(QColor(GameColors.SELECTION_GLOW), 4))
        else:
            painter.setPen(QPen(QColor(0, 0, 0, 50), 2))
        painter.drawPolygon(_polygon(body.x, body.y, entity.value, size, body.rotation))

        painter.setPen(QColor(0, 0, 0, 180))
        font = painter.font()
        font.setPointSize(13)
        font.setBold(True)
        painter.setFont(font)
        box = int(size)
        painter.drawText(int(body.x) - box, int(body.y) - box, 2 * box, 2 * box, Qt.AlignCenter, str(entity.value))


class GoalBadge(QWidget):
    """The goal drawn as a polygon (capped at ten sides) in its own color."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._goal: Optional[int] = None
        self.setFixedSize(100, 100)

    def set_goal(self, goal: int) -> None:
        self._goal = goal
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if self._goal is None:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        sides = max(3, min(self._goal, MAX_DRAWN_SIDES))
        painter.setBrush(QColor(goal_color(self._goal)))
        painter.setPen(QPen(QColor(0, 0, 0, 50), 2))
        painter.drawPolygon(_polygon(self.width() / 2, self.height() / 2, sides, 35, 0.0))
