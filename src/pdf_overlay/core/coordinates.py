# SPDX-License-Identifier: Apache-2.0
"""Conversion between screen, stored page and PDF coordinates.

Three coordinate systems are involved:

- screen: pointer positions in pixels, as reported by the host;
- stored page: unscaled PDF units with a top-left origin (Y down), the
  convention used by ``TextElement``;
- PDF user space: bottom-left origin (Y up), only used by the compositor.

Everything here is a pure function of its arguments. Page layout can change
between calls (zoom, page navigation, window resize), so callers pass the
current page bounding box and scale every time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .calibration import DEFAULT_CALIBRATION, VisualCalibration
from .models import GlyphAnchor, PageGeometry, TextElement

logger = logging.getLogger(__name__)


@dataclass
class ScreenRect:
    """Rendered page bounding box in screen pixels."""

    left: float
    top: float
    width: float = 0.0
    height: float = 0.0


@dataclass
class SnapCandidates:
    """Ordered snap targets per axis, in stored page units."""

    xs: list[float] = field(default_factory=list)
    ys: list[float] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.xs or self.ys)


def _check_scale(scale: float) -> None:
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")


def screen_to_page(
    screen_x: float,
    screen_y: float,
    page_origin: Optional[ScreenRect],
    scale: float,
) -> tuple[float, float]:
    """Convert a screen point to unclamped stored page coordinates.

    Args:
        screen_x: Pointer X in screen pixels.
        screen_y: Pointer Y in screen pixels.
        page_origin: Bounding box of the rendered page element, or None
            when the page is not mounted yet.
        scale: Current display scale (must be > 0).

    Returns:
        (x, y) in page units; (0.0, 0.0) when the page is not rendered.
    """
    if page_origin is None:
        return (0.0, 0.0)
    _check_scale(scale)
    return (
        (screen_x - page_origin.left) / scale,
        (screen_y - page_origin.top) / scale,
    )


def page_to_screen(x: float, y: float, scale: float) -> tuple[float, float]:
    """Convert stored page coordinates to offsets inside the rendered page."""
    return (x * scale, y * scale)


def clamp_to_page(
    x: float,
    y: float,
    geometry: PageGeometry,
    margin: float = 0.0,
) -> tuple[float, float]:
    """Clamp a point into the page, optionally keeping an inner margin.

    A margin larger than half the page collapses to zero on that axis.
    """
    margin_x = margin if geometry.width >= 2 * margin else 0.0
    margin_y = margin if geometry.height >= 2 * margin else 0.0
    clamped_x = max(margin_x, min(x, geometry.width - margin_x))
    clamped_y = max(margin_y, min(y, geometry.height - margin_y))
    return (clamped_x, clamped_y)


def build_snap_candidates(
    elements: Iterable[TextElement],
    anchors: Iterable[GlyphAnchor] = (),
    calibration: VisualCalibration = DEFAULT_CALIBRATION,
    exclude_id: Optional[str] = None,
) -> SnapCandidates:
    """Collect snap targets for one page.

    Element positions are used as-is. Glyph anchors mark where ink starts,
    while an element box starts one padding earlier, so anchor values are
    shifted by the overlay padding.

    Args:
        elements: Elements already on the current page.
        anchors: Glyph anchors extracted from the page content.
        calibration: Source of the padding offsets.
        exclude_id: Element to leave out (e.g. the one being placed).

    Returns:
        Candidates in encounter order: elements first, then anchors.
    """
    candidates = SnapCandidates()
    for element in elements:
        if element.id == exclude_id:
            continue
        candidates.xs.append(element.x)
        candidates.ys.append(element.y)
    for anchor in anchors:
        candidates.xs.append(anchor.x - calibration.snap_padding_x)
        candidates.ys.append(anchor.y - calibration.snap_padding_y)
    return candidates


def snap_axis(value: float, candidates: Iterable[float], threshold: float) -> float:
    """Snap one axis to the nearest candidate within threshold.

    Ties keep the first candidate encountered.
    """
    best: Optional[float] = None
    best_distance = float("inf")
    for candidate in candidates:
        distance = abs(candidate - value)
        if distance < best_distance:
            best = candidate
            best_distance = distance
    if best is not None and best_distance <= threshold:
        return best
    return value


def snap_point(
    x: float,
    y: float,
    candidates: SnapCandidates,
    threshold: float,
) -> tuple[float, float]:
    """Snap X and Y independently."""
    return (
        snap_axis(x, candidates.xs, threshold),
        snap_axis(y, candidates.ys, threshold),
    )


def convert_placement(
    screen_x: float,
    screen_y: float,
    page_origin: Optional[ScreenRect],
    scale: float,
    geometry: PageGeometry,
    candidates: Optional[SnapCandidates] = None,
    calibration: VisualCalibration = DEFAULT_CALIBRATION,
) -> tuple[float, float]:
    """Convert a click or drop point to a new element position.

    Screen point -> page units -> snapping -> clamping to the page.

    Args:
        screen_x: Pointer X in screen pixels.
        screen_y: Pointer Y in screen pixels.
        page_origin: Rendered page bounding box (None if not mounted).
        scale: Current display scale.
        geometry: Native page size.
        candidates: Snap targets, if snapping is wanted.
        calibration: Snap threshold source.

    Returns:
        Clamped (x, y) in stored page units.
    """
    if page_origin is None:
        return (0.0, 0.0)

    x, y = screen_to_page(screen_x, screen_y, page_origin, scale)
    if candidates:
        snapped = snap_point(x, y, candidates, calibration.snap_threshold)
        if snapped != (x, y):
            logger.debug("Snapped (%.2f, %.2f) -> (%.2f, %.2f)", x, y, *snapped)
        x, y = snapped
    return clamp_to_page(x, y, geometry)


def convert_drag(
    initial: tuple[float, float],
    drag_start: tuple[float, float],
    pointer: tuple[float, float],
    scale: float,
    geometry: PageGeometry,
    calibration: VisualCalibration = DEFAULT_CALIBRATION,
) -> tuple[float, float]:
    """Compute an element position while it is being dragged.

    The pointer delta since the drag started is divided by the scale and
    added to the element's initial position, rounded to whole units and
    clamped so the drag margin stays inside the page.

    Args:
        initial: Element position when the drag started.
        drag_start: Pointer screen position when the drag started.
        pointer: Current pointer screen position.
        scale: Current display scale.
        geometry: Native page size.
        calibration: Drag margin source.

    Returns:
        New (x, y) in stored page units.
    """
    _check_scale(scale)
    new_x = initial[0] + (pointer[0] - drag_start[0]) / scale
    new_y = initial[1] + (pointer[1] - drag_start[1]) / scale
    return clamp_to_page(
        float(round(new_x)),
        float(round(new_y)),
        geometry,
        margin=calibration.drag_margin,
    )
