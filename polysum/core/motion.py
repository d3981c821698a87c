"""Drift-and-bounce motion for the floating shapes.

Bodies never interact with each other and never touch game state: freezing
them (or never ticking) leaves every round exactly as playable.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from polysum.core.layout import HIT_PADDING

# Radians per second.
PULSE_SPEED = 3.0
SPIN_RANGE = 1.2


@dataclass(frozen=True)
class Bounds:
    width: float
    height: float


@dataclass
class Body:
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    radius: float = 35.0
    rotation: float = 0.0
    rotation_speed: float = 0.0
    pulse_phase: float = 0.0

    @property
    def margin(self) -> float:
        return self.radius + HIT_PADDING

    def advance(self, dt: float, bounds: Bounds) -> None:
        """Move by ``velocity * dt`` seconds, bouncing off the arena edges."""
        self.x += self.vx * dt
        self.y += self.vy * dt

        margin = self.margin
        if self.x < margin or self.x > bounds.width - margin:
            self.vx = -self.vx
            self.x = _clamp(self.x, margin, bounds.width - margin)
        if self.y < margin or self.y > bounds.height - margin:
            self.vy = -self.vy
            self.y = _clamp(self.y, margin, bounds.height - margin)

        self.rotation = (self.rotation + self.rotation_speed * dt) % (2 * math.pi)
        self.pulse_phase = (self.pulse_phase + PULSE_SPEED * dt) % (2 * math.pi)

    def clamp(self, bounds: Bounds) -> None:
        """Pull the body back inside *bounds*; velocity is left alone."""
        margin = self.margin
        self.x = _clamp(self.x, margin, bounds.width - margin)
        self.y = _clamp(self.y, margin, bounds.height - margin)


def _clamp(value: float, low: float, high: float) -> float:
    if high < low:
        # arena narrower than the shape: park it in the middle
        return (low + high) / 2
    return max(low, min(high, value))


def spawn_body(x: float, y: float, rng: random.Random, base_speed: float, radius: float) -> Body:
    """Create a body at (x, y) heading in a random direction at 50-100% of *base_speed*."""
    angle = rng.random() * 2 * math.pi
    speed = base_speed * (0.5 + rng.random() * 0.5)
    return Body(
        x=x,
        y=y,
        vx=math.cos(angle) * speed,
        vy=math.sin(angle) * speed,
        radius=radius,
        rotation=rng.random() * 2 * math.pi,
        rotation_speed=(rng.random() - 0.5) * SPIN_RANGE,
        pulse_phase=rng.random() * 2 * math.pi,
    )
