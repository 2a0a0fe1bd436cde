"""
VectorDraft Gradient Model

Gradient normalization, stop interpolation and conversion to the
flattened stop lists and CSS strings consumed by renderers.

Gradient handles are normalized (0..1) points relative to the bounds of
the filled shape. Linear and radial gradients are rendered natively
from their handle pair and colour stops; angular and diamond gradients
are rasterized per pixel (see ``vectordraft.graphics.gradient_raster``).
"""

from dataclasses import dataclass, field, replace
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union
import math
import re

from .geometry import BoundingBox, Point, clamp, coerce_number


HEX_REGEX = re.compile(r'^#([0-9a-f]{6})$', re.IGNORECASE)

LINEAR = 'linear'
RADIAL = 'radial'
ANGULAR = 'angular'
DIAMOND = 'diamond'
GRADIENT_TYPES = (LINEAR, RADIAL, ANGULAR, DIAMOND)

MIN_STOPS = 2
MAX_STOPS = 8


@dataclass(frozen=True)
class GradientStop:
    """A colour sample along the gradient ramp."""
    position: float
    color: str
    opacity: float = 1.0


@dataclass(frozen=True)
class GradientHandles:
    """Start/end of the gradient axis, normalized to the shape bounds."""
    start: Point = Point(0.0, 0.5)
    end: Point = Point(1.0, 0.5)


@dataclass(frozen=True)
class ColorSample:
    """Result of sampling a gradient ramp."""
    color: str
    opacity: float


@dataclass(frozen=True)
class Gradient:
    """A normalized gradient description."""
    type: str = LINEAR
    angle: float = 135.0
    handles: GradientHandles = field(default_factory=GradientHandles)
    stops: Tuple[GradientStop, ...] = ()


DEFAULT_STOPS = (
    GradientStop(0.0, '#6366f1', 1.0),
    GradientStop(1.0, '#f97316', 1.0),
)


def default_gradient_handles(gradient_type: str, angle: float) -> GradientHandles:
    """
    Derive handles from a CSS-style angle (0 points up, 90 to the right).

    Linear gradients span the box through its centre; the other types
    start at the centre and reach the box edge.
    """
    theta = math.radians(angle)
    dx = math.sin(theta) * 0.5
    dy = -math.cos(theta) * 0.5
    if gradient_type == LINEAR:
        return GradientHandles(Point(0.5 - dx, 0.5 - dy), Point(0.5 + dx, 0.5 + dy))
    return GradientHandles(Point(0.5, 0.5), Point(0.5 + dx, 0.5 + dy))


DEFAULT_GRADIENT = Gradient(
    type=LINEAR,
    angle=135.0,
    handles=default_gradient_handles(LINEAR, 135.0),
    stops=DEFAULT_STOPS,
)

GradientInput = Union[Gradient, Mapping[str, Any], None]


def normalize_color(value, fallback: str = '#000000') -> str:
    """Lower-case ``#rrggbb`` or the fallback."""
    if isinstance(value, str) and HEX_REGEX.match(value):
        return value.lower()
    return fallback


def normalize_opacity(value, fallback: float = 1.0) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return clamp(float(fallback), 0.0, 1.0)
    return clamp(float(value), 0.0, 1.0)


def _field(source, name: str, default=None):
    if isinstance(source, Mapping):
        return source.get(name, default)
    return getattr(source, name, default)


def normalize_stops(stops, fallback_stops: Sequence[GradientStop] = DEFAULT_STOPS) -> Tuple[GradientStop, ...]:
    """
    Repair a stop list.

    At most eight stops are kept, each field defaulted from the stop at
    the same index in ``fallback_stops``; the result is sorted by
    position. Fewer than two usable stops yields the fallback stops.
    """
    if not isinstance(stops, (list, tuple)) or len(stops) < MIN_STOPS:
        return tuple(fallback_stops)

    normalized: List[GradientStop] = []
    for index, stop in enumerate(stops[:MAX_STOPS]):
        fallback_stop = fallback_stops[min(index, len(fallback_stops) - 1)]
        if stop is None:
            normalized.append(fallback_stop)
            continue
        raw_position = _field(stop, 'position')
        if isinstance(raw_position, bool) or not isinstance(raw_position, (int, float)):
            raw_position = fallback_stop.position
        if raw_position != raw_position:
            continue
        normalized.append(GradientStop(
            position=clamp(float(raw_position), 0.0, 1.0),
            color=normalize_color(_field(stop, 'color'), fallback_stop.color),
            opacity=normalize_opacity(_field(stop, 'opacity'), fallback_stop.opacity),
        ))

    if len(normalized) < MIN_STOPS:
        return tuple(fallback_stops)

    normalized.sort(key=lambda s: s.position)
    return tuple(normalized)


def _normalize_handle_point(value, default: Point) -> Point:
    if value is None:
        return default
    return Point(
        clamp(coerce_number(_field(value, 'x'), default.x), 0.0, 1.0),
        clamp(coerce_number(_field(value, 'y'), default.y), 0.0, 1.0),
    )


def normalize_gradient(value: GradientInput, fallback: Gradient = DEFAULT_GRADIENT) -> Gradient:
    """
    Return a well-formed ``Gradient``.

    Accepts a ``Gradient`` or a mapping (as produced by UI code or JSON).
    Unknown types fall back to ``fallback.type``; the angle is wrapped to
    [0, 360); stops are repaired with ``normalize_stops``; missing
    handles are derived from the type and angle.
    """
    if value is None or not isinstance(value, (Gradient, Mapping)):
        return fallback

    raw_type = _field(value, 'type')
    type_source = raw_type.lower() if isinstance(raw_type, str) else fallback.type
    gradient_type = type_source if type_source in GRADIENT_TYPES else fallback.type

    raw_angle = _field(value, 'angle')
    if isinstance(raw_angle, bool) or not isinstance(raw_angle, (int, float)) or not math.isfinite(raw_angle):
        raw_angle = fallback.angle
    angle = float(raw_angle) % 360.0

    stops = normalize_stops(_field(value, 'stops'), fallback.stops or DEFAULT_STOPS)

    defaults = default_gradient_handles(gradient_type, angle)
    raw_handles = _field(value, 'handles')
    if raw_handles is None:
        handles = defaults
    else:
        handles = GradientHandles(
            _normalize_handle_point(_field(raw_handles, 'start'), defaults.start),
            _normalize_handle_point(_field(raw_handles, 'end'), defaults.end),
        )

    return Gradient(type=gradient_type, angle=angle, handles=handles, stops=stops)


def hex_to_rgb(color: str) -> Optional[Tuple[int, int, int]]:
    match = HEX_REGEX.match(color) if isinstance(color, str) else None
    if not match:
        return None
    value = int(match.group(1), 16)
    return (value >> 16) & 255, (value >> 8) & 255, value & 255


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    channels = (int(clamp(round_half_up(c), 0, 255)) for c in (r, g, b))
    return '#' + ''.join(f'{c:02x}' for c in channels)


def _mix(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def interpolate_gradient_color(stops: Optional[Sequence[GradientStop]], position: float) -> ColorSample:
    """
    Sample a stop list at ``position``.

    The position is clamped to [0, 1]. Outside the stop range the
    boundary stop is returned as is; between two stops the RGB channels
    and opacity are interpolated linearly.
    """
    if not stops:
        return ColorSample(DEFAULT_STOPS[0].color, 1.0)

    ordered = sorted(
        (GradientStop(
            position=clamp(coerce_number(_field(stop, 'position'), 0.0), 0.0, 1.0),
            color=normalize_color(_field(stop, 'color'), DEFAULT_STOPS[0].color),
            opacity=normalize_opacity(_field(stop, 'opacity'), 1.0),
        ) for stop in stops),
        key=lambda s: s.position,
    )

    t_pos = clamp(coerce_number(position, 0.0), 0.0, 1.0)

    first = ordered[0]
    if t_pos <= first.position:
        return ColorSample(first.color, first.opacity)
    last = ordered[-1]
    if t_pos >= last.position:
        return ColorSample(last.color, last.opacity)

    left, right = first, last
    for current, nxt in zip(ordered, ordered[1:]):
        if current.position <= t_pos <= nxt.position:
            left, right = current, nxt
            break

    span = right.position - left.position
    t = 0.0 if span == 0 else (t_pos - left.position) / span

    left_rgb = hex_to_rgb(left.color)
    right_rgb = hex_to_rgb(right.color) or left_rgb
    color = rgb_to_hex(*(_mix(a, b, t) for a, b in zip(left_rgb, right_rgb)))
    return ColorSample(color, _mix(left.opacity, right.opacity, t))


def stop_css_color(stop: GradientStop) -> str:
    """Hex for opaque stops, ``rgba()`` otherwise."""
    opacity = clamp(stop.opacity, 0.0, 1.0)
    if opacity >= 1:
        return stop.color
    rgb = hex_to_rgb(stop.color)
    if rgb is None:
        return stop.color
    alpha = format(round_half_up(opacity * 1000) / 1000, 'g')
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})"


def build_gradient_color_stops(gradient: GradientInput) -> List[Union[float, str]]:
    """Flatten stops to ``[position, css, position, css, ...]``."""
    normalized = normalize_gradient(gradient)
    flat: List[Union[float, str]] = []
    for stop in normalized.stops:
        flat.append(stop.position)
        flat.append(stop_css_color(stop))
    return flat


def gradient_to_css(gradient: GradientInput) -> str:
    """CSS background for swatches and previews."""
    normalized = normalize_gradient(gradient)
    stops = ', '.join(
        f"{stop_css_color(stop)} {round_half_up(stop.position * 100)}%"
        for stop in normalized.stops
    )
    angle = format(normalized.angle, 'g')
    if normalized.type == RADIAL:
        return f"radial-gradient(circle, {stops})"
    if normalized.type == ANGULAR:
        return f"conic-gradient(from {angle}deg at 50% 50%, {stops})"
    if normalized.type == DIAMOND:
        return f"conic-gradient(from {format(normalized.angle + 45, 'g')}deg at 50% 50%, {stops})"
    return f"linear-gradient({angle}deg, {stops})"


def gradients_equal(a: GradientInput, b: GradientInput) -> bool:
    """Compare type, angle and stops after normalization (handles ignored)."""
    first = normalize_gradient(a)
    second = normalize_gradient(b)
    return (first.type == second.type and
            first.angle == second.angle and
            first.stops == second.stops)


def gradient_first_color(gradient: GradientInput, fallback: str = '#000000') -> str:
    normalized = normalize_gradient(gradient)
    return normalized.stops[0].color if normalized.stops else fallback


def requires_rasterization(gradient_type: str) -> bool:
    """Angular and diamond gradients have no native primitive."""
    return gradient_type in (ANGULAR, DIAMOND)


def resolve_gradient_handles(gradient: Gradient, box: BoundingBox) -> Tuple[Point, Point]:
    """Absolute start/end handle positions within ``box``."""
    start = gradient.handles.start
    end = gradient.handles.end
    return (
        Point(box.min_x + start.x * box.width, box.min_y + start.y * box.height),
        Point(box.min_x + end.x * box.width, box.min_y + end.y * box.height),
    )


def handle_from_absolute(point: Point, box: BoundingBox) -> Point:
    """Inverse of ``resolve_gradient_handles`` for a single point, clamped to 0..1."""
    width = box.width or 1.0
    height = box.height or 1.0
    return Point(
        clamp((point.x - box.min_x) / width, 0.0, 1.0),
        clamp((point.y - box.min_y) / height, 0.0, 1.0),
    )


STOP_OVERLAP = 0.0005
STOP_NUDGE = 0.05


def _direction(angle: float) -> Tuple[float, float]:
    theta = math.radians(angle)
    return math.sin(theta), -math.cos(theta)


def _clamped_point(x: float, y: float) -> Point:
    return Point(clamp(x, 0.0, 1.0), clamp(y, 0.0, 1.0))


def gradient_handles_angle(handles: GradientHandles, fallback: float = 0.0) -> float:
    """CSS-style angle of the start->end axis; ``fallback`` when the handles coincide."""
    dx = handles.end.x - handles.start.x
    dy = handles.end.y - handles.start.y
    if dx == 0 and dy == 0:
        return fallback
    return math.degrees(math.atan2(dx, -dy)) % 360.0


def swap_gradient_handles(handles: GradientHandles) -> GradientHandles:
    return GradientHandles(handles.end, handles.start)


def rotate_gradient_handles(gradient: Gradient, degrees: float = 90.0) -> Gradient:
    """
    Rotate the handle axis clockwise by ``degrees``.

    Linear handles turn about their midpoint, the other types turn the
    end handle about the start (the centre). The angle follows the new
    handles.
    """
    handles = gradient.handles
    theta = math.radians(degrees)
    cos_t, sin_t = math.cos(theta), math.sin(theta)

    def turn(x, y):
        return x * cos_t - y * sin_t, x * sin_t + y * cos_t

    if gradient.type == LINEAR:
        mid_x = (handles.start.x + handles.end.x) / 2
        mid_y = (handles.start.y + handles.end.y) / 2
        dx, dy = turn(handles.end.x - mid_x, handles.end.y - mid_y)
        rotated = GradientHandles(
            _clamped_point(mid_x - dx, mid_y - dy),
            _clamped_point(mid_x + dx, mid_y + dy),
        )
    else:
        dx, dy = turn(handles.end.x - handles.start.x, handles.end.y - handles.start.y)
        rotated = GradientHandles(
            handles.start,
            _clamped_point(handles.start.x + dx, handles.start.y + dy),
        )
    return replace(gradient, handles=rotated,
                   angle=gradient_handles_angle(rotated, gradient.angle))


def set_gradient_angle(gradient: Gradient, angle: float) -> Gradient:
    """
    Point the handles along ``angle``.

    Linear handles keep their midpoint and length; the other types keep
    the start handle and its distance to the end. A zero-length axis is
    given half the box.
    """
    if isinstance(angle, bool) or not isinstance(angle, (int, float)) or not math.isfinite(angle):
        return gradient
    handles = gradient.handles
    ux, uy = _direction(angle)
    length = math.hypot(handles.end.x - handles.start.x, handles.end.y - handles.start.y)
    if gradient.type == LINEAR:
        half = length / 2 or 0.5
        mid_x = (handles.start.x + handles.end.x) / 2
        mid_y = (handles.start.y + handles.end.y) / 2
        placed = GradientHandles(
            _clamped_point(mid_x - ux * half, mid_y - uy * half),
            _clamped_point(mid_x + ux * half, mid_y + uy * half),
        )
    else:
        radius = length or 0.5
        placed = GradientHandles(
            handles.start,
            _clamped_point(handles.start.x + ux * radius, handles.start.y + uy * radius),
        )
    return replace(gradient, angle=float(angle), handles=placed)


def set_gradient_type(gradient: Gradient, gradient_type: str) -> Gradient:
    """Switch type; handles and angle reset to the type's defaults."""
    if gradient_type not in GRADIENT_TYPES:
        return gradient
    return replace(
        gradient,
        type=gradient_type,
        angle=0.0,
        handles=default_gradient_handles(gradient_type, 0.0),
    )


def flip_gradient(gradient: Gradient) -> Gradient:
    """Mirror the ramp; linear gradients also swap their handles."""
    stops = tuple(
        replace(stop, position=1.0 - stop.position)
        for stop in reversed(gradient.stops)
    )
    if gradient.type != LINEAR:
        return replace(gradient, stops=stops)
    handles = swap_gradient_handles(gradient.handles)
    return replace(gradient, stops=stops, handles=handles,
                   angle=gradient_handles_angle(handles, gradient.angle))


def _overlaps(stops: Sequence[GradientStop], position: float) -> bool:
    return any(abs(stop.position - position) < STOP_OVERLAP for stop in stops)


def add_gradient_stop(gradient: Gradient, position: Optional[float] = None,
                      active_index: int = 0) -> Gradient:
    """
    Insert a stop sampled from the current ramp.

    Without an explicit ``position`` the stop goes halfway between the
    active stop and the next one, or 0.1 past the last stop. A position
    already taken by a stop is nudged up (or else down) by 0.05. No-op
    once ``MAX_STOPS`` is reached.
    """
    stops = gradient.stops
    if len(stops) >= MAX_STOPS:
        return gradient

    if isinstance(position, (int, float)) and not isinstance(position, bool):
        target = clamp(float(position), 0.0, 1.0)
    elif len(stops) > 1:
        index = int(clamp(active_index, 0, len(stops) - 1))
        current = stops[index]
        if index + 1 < len(stops):
            target = current.position + (stops[index + 1].position - current.position) / 2
        else:
            target = clamp(current.position + 0.1, 0.0, 1.0)
            if target == current.position:
                target = clamp(current.position - 0.1, 0.0, 1.0)
    else:
        target = 0.5

    if _overlaps(stops, target):
        upward = clamp(target + STOP_NUDGE, 0.0, 1.0)
        downward = clamp(target - STOP_NUDGE, 0.0, 1.0)
        if not _overlaps(stops, upward):
            target = upward
        elif not _overlaps(stops, downward):
            target = downward

    sample = interpolate_gradient_color(stops, target)
    added = GradientStop(target, sample.color, sample.opacity)
    return replace(gradient, stops=tuple(sorted(stops + (added,), key=lambda s: s.position)))


def remove_gradient_stop(gradient: Gradient, index: int) -> Gradient:
    """Drop the stop at ``index`` (clamped); ``MIN_STOPS`` always remain."""
    stops = gradient.stops
    if len(stops) <= MIN_STOPS:
        return gradient
    index = int(clamp(index, 0, len(stops) - 1))
    return replace(gradient, stops=stops[:index] + stops[index + 1:])


def gradient_to_dict(gradient: Gradient) -> dict:
    return {
        'type': gradient.type,
        'angle': gradient.angle,
        'handles': {
            'start': {'x': gradient.handles.start.x, 'y': gradient.handles.start.y},
            'end': {'x': gradient.handles.end.x, 'y': gradient.handles.end.y},
        },
        'stops': [
            {'position': s.position, 'color': s.color, 'opacity': s.opacity}
            for s in gradient.stops
        ],
    }
