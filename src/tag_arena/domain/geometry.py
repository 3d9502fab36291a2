"""Arena geometry helpers."""

import math
import random
from dataclasses import dataclass

from tag_arena.domain.errors import InvalidPosition, InvalidRadius


@dataclass(frozen=True)
class Point:
    """A position in game space, centered at the arena origin."""

    x: float
    y: float

    def norm(self) -> float:
        """Return the distance from the arena origin."""
        return math.hypot(self.x, self.y)


ORIGIN = Point(0.0, 0.0)


def validate_point(x: float, y: float) -> Point:
    """Build a point, rejecting NaN and infinite coordinates."""
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidPosition(f"Position ({x}, {y}) must have finite coordinates")
    return Point(float(x), float(y))


def validate_radius(radius: float) -> float:
    """Return the radius when it is a positive finite number."""
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidRadius(f"Arena radius must be positive, got {radius}")
    return float(radius)


def clamp_to_circle(point: Point, radius: float) -> Point:
    """Project a point radially onto the boundary when it lies outside."""
    length = point.norm()
    if length == 0 or length <= radius:
        return point
    scale = radius / length
    return Point(point.x * scale, point.y * scale)


def clamp_step(origin: Point, target: Point, max_step: float) -> Point:
    """Limit the travel from origin towards target to max_step units."""
    dx = target.x - origin.x
    dy = target.y - origin.y
    length = math.hypot(dx, dy)
    if length == 0 or length <= max_step:
        return target
    scale = max_step / length
    return Point(origin.x + dx * scale, origin.y + dy * scale)


def random_edge_point(radius: float, rng: random.Random | None = None) -> Point:
    """Return a point on the boundary at a uniformly random angle."""
    angle = (rng or random).random() * 2 * math.pi
    return Point(radius * math.cos(angle), radius * math.sin(angle))


def distance(a: Point, b: Point) -> float:
    """Return the Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)
