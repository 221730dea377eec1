"""
Gamblegram transition and label placement.

One GamblegramAnimator serves one drawing surface. It owns the surface's
RenderState and at most one running tween; the caller drives it by
calling tick() from its frame loop (QTimer, headless loop, tests).
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .constants import AnimationTuning
from .enums import IonKey, Side
from .stack_builder import GamblegramGeometry
from .state import Frame, GamblegramLayout, RenderState, SegmentFrame, SegmentGeometry
from .utils import clamp01, lerp

logger = logging.getLogger(__name__)


def ease_out_cubic(p: float) -> float:
    return 1.0 - (1.0 - p) ** 3


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


def place_labels(centres: Sequence[float], label_height: float, spacing: float) -> List[float]:
    """
    Greedy single-pass label placement for one column.

    Labels are placed top to bottom (ascending y). A label that overlaps an
    already placed one is pushed just below it. Overlaps with labels that
    were themselves shifted earlier are not revisited.

    Returns:
        Adjusted label centres, in the order of `centres`
    """
    placed = []
    adjusted = list(centres)
    half = label_height / 2.0
    for idx in sorted(range(len(centres)), key=lambda i: centres[i]):
        y = centres[idx]
        for other_y, other_h in placed:
            if abs(y - other_y) < half + other_h / 2.0 + spacing:
                y = other_y + other_h / 2.0 + half + spacing
        placed.append((y, label_height))
        adjusted[idx] = y
    return adjusted


@dataclass
class _Track:
    key: IonKey
    side: Side
    value: float
    color: str
    start: SegmentGeometry
    target: SegmentGeometry


class _Tween:
    """A single time-based interpolation between two sets of geometry."""

    def __init__(self, tracks: List[_Track], t0: float, duration: float):
        self.tracks = tracks
        self.t0 = t0
        self.duration = duration
        self.last_frame: Optional[Frame] = None

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return clamp01((now - self.t0) / self.duration)

    def is_static(self) -> bool:
        return all(t.start == t.target for t in self.tracks)


class GamblegramAnimator:
    """
    Eased transition between successive Gamblegram layouts.

    Starting a new transition cancels the running one and continues from
    whatever geometry was last on screen, so rapid recomputation never
    snaps bars back to an old target.
    """

    def __init__(
        self,
        render_state: Optional[RenderState] = None,
        geometry: Optional[GamblegramGeometry] = None,
        tuning: Optional[AnimationTuning] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.render_state = render_state if render_state is not None else RenderState()
        self.geometry = geometry or GamblegramGeometry()
        self.tuning = tuning or AnimationTuning()
        self.clock = clock or monotonic_ms
        self._tween: Optional[_Tween] = None
        self._last_frame: Optional[Frame] = None

    @property
    def is_active(self) -> bool:
        return self._tween is not None

    @property
    def last_frame(self) -> Optional[Frame]:
        return self._last_frame

    def _now(self, now: Optional[float]) -> float:
        return self.clock() if now is None else now

    def _start_geometry(self, key: IonKey, baseline: float) -> SegmentGeometry:
        prev = self.render_state.lookup(key)
        if prev is None:
            extent = self.tuning.new_segment_extent
            return SegmentGeometry(baseline - extent, extent)
        return SegmentGeometry(prev.offset, max(self.tuning.min_start_extent, prev.extent))

    def start(self, layout: GamblegramLayout, now: Optional[float] = None) -> Frame:
        """
        Begin the transition to `layout`.

        Returns:
            The first frame (or the final one when nothing moves)
        """
        now = self._now(now)
        self.cancel()

        tracks = []
        for side, column in layout.columns():
            for placed in column:
                tracks.append(_Track(
                    key=placed.key,
                    side=side,
                    value=placed.value,
                    color=placed.segment.color,
                    start=self._start_geometry(placed.key, layout.baseline),
                    target=SegmentGeometry(placed.offset, placed.extent),
                ))

        self._tween = _Tween(tracks, now, self.tuning.duration)
        if self._tween.is_static():
            logger.debug("Gamblegram unchanged; skipping transition")
            return self._complete()

        logger.debug("Gamblegram transition started with %d segments", len(tracks))
        return self._render(0.0)

    def tick(self, now: Optional[float] = None) -> Optional[Frame]:
        """Advance the running transition; returns the last frame when idle."""
        if self._tween is None:
            return self._last_frame
        p = self._tween.progress(self._now(now))
        if p >= 1.0:
            return self._complete()
        return self._render(p)

    def finish(self) -> Optional[Frame]:
        """Jump the running transition to its end."""
        if self._tween is None:
            return self._last_frame
        return self._complete()

    def cancel(self):
        """
        Stop the running transition, keeping its on-screen geometry as the
        starting point of the next one.
        """
        if self._tween is None:
            return
        frame = self._tween.last_frame
        if frame is not None:
            self.render_state.persist({
                s.key: SegmentGeometry(s.offset, s.extent) for s in frame.segments
            })
        logger.debug("Gamblegram transition cancelled")
        self._tween = None

    def _complete(self) -> Frame:
        frame = self._render(1.0)
        self.render_state.persist({t.key: t.target for t in self._tween.tracks})
        self._tween = None
        logger.debug("Gamblegram transition finished")
        return frame

    def _render(self, p: float) -> Frame:
        e = ease_out_cubic(p)
        floor = self.tuning.min_render_extent
        segments: Dict[Side, List[SegmentFrame]] = {Side.CATION: [], Side.ANION: []}
        for track in self._tween.tracks:
            offset = lerp(track.start.offset, track.target.offset, e)
            extent = max(floor, lerp(track.start.extent, track.target.extent, e))
            segments[track.side].append(SegmentFrame(
                key=track.key,
                side=track.side,
                value=track.value,
                color=track.color,
                offset=offset,
                extent=extent,
                label_y=offset + extent / 2.0,
            ))

        for column in segments.values():
            label_ys = place_labels(
                [s.label_y for s in column],
                self.geometry.label_height,
                self.geometry.label_spacing,
            )
            for seg, y in zip(column, label_ys):
                seg.label_y = y

        frame = Frame(progress=p, segments=tuple(segments[Side.CATION] + segments[Side.ANION]))
        self._tween.last_frame = frame
        self._last_frame = frame
        return frame
