# speechseg/sound/SpeechAccumulator.py
"""
Tests for this module:
- tests/test_speech_accumulator.py - State transitions, gap tolerance, stale detection
"""
import logging
from typing import Optional
from ..SegmenterConfig import SegmenterConfig
from ..types import AccumulatorState, FrameRange
from .FrameWindow import FrameWindow
from .RangeSplitter import RangeSplitter


class SpeechAccumulator:
    """Decides, per correlated range, whether to extend or flush the pending span.

    The pending span is an explicit tagged state: IDLE carries no range,
    ACCUMULATING carries a FrameRange. A span at [0, 0] is therefore a real
    one-frame span, not "nothing pending".

    Gap Tolerance:
    - Both the pending span and the new range are trimmed of silent edges
    - gap = trimmed(new).start - trimmed(pending).end
    - gap > merge_gap (e.g. 2): genuine boundary, the pending span is returned
      for flushing and the new range becomes the pending span
    - otherwise the pending span's end moves to max(pending.end, new.end)

    The accumulator never owns frames and never emits; SegmentationEngine
    flushes the spans it returns, chops the window and calls rebase().

    Args:
        config: SegmenterConfig with merge_gap and stale_span
        splitter: RangeSplitter used for silence trimming
        verbose: Enable verbose logging
    """

    def __init__(self, config: SegmenterConfig, splitter: RangeSplitter, verbose: bool = False):
        self.merge_gap: int = config.merge_gap
        self.stale_span: int = config.stale_span
        self.splitter: RangeSplitter = splitter
        self.verbose: bool = verbose
        self._pending: Optional[FrameRange] = None

    @property
    def state(self) -> AccumulatorState:
        if self._pending is None:
            return AccumulatorState.IDLE
        return AccumulatorState.ACCUMULATING

    @property
    def pending(self) -> Optional[FrameRange]:
        """Copy of the pending span, or None while IDLE."""
        return self._pending.copy() if self._pending is not None else None

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def on_range(self, frame_range: FrameRange, window: FrameWindow) -> Optional[FrameRange]:
        """Feed one correlated range into the state machine.

        Args:
            frame_range: Range produced by ClassificationCorrelator
            window: Window both ranges index into

        Returns:
            The span to flush when a boundary was found, otherwise None
        """
        match self.state:
            case AccumulatorState.IDLE:
                # IDLE → ACCUMULATING
                self._pending = frame_range.copy()
                if self.verbose:
                    logging.debug(f"SpeechAccumulator: pending span started at {self._pending}")
                return None

            case AccumulatorState.ACCUMULATING:
                new_trim = self.splitter.trim_silence(frame_range, window)
                pending_trim = self.splitter.trim_silence(self._pending, window)
                gap = new_trim.start - pending_trim.end

                if gap > self.merge_gap:
                    # ACCUMULATING → ACCUMULATING (flush + restart)
                    flushed = self._pending
                    self._pending = frame_range.copy()
                    if self.verbose:
                        logging.debug(
                            f"SpeechAccumulator: gap={gap} after {flushed}, "
                            f"flushing and starting {self._pending}"
                        )
                    return flushed

                # ACCUMULATING → ACCUMULATING (extend)
                self._pending.set_end(max(self._pending.end, frame_range.end))
                if self.verbose:
                    logging.debug(f"SpeechAccumulator: extended pending span to {self._pending}")
                return None

    def is_stale(self, window_length: int) -> bool:
        """Check whether the window tail ran more than stale_span frames past the span."""
        if self._pending is None:
            return False
        return window_length - self._pending.end > self.stale_span

    def rebase(self, chopped: int) -> None:
        """Re-base the pending span after chopped frames left the window front.

        A span that ends before the new origin no longer refers to buffered
        frames and is dropped (ACCUMULATING → IDLE); one that straddles it
        is clamped to start at 0.
        """
        if self._pending is None or chopped <= 0:
            return
        self._pending.shift(-chopped)
        if self._pending.end < 0:
            logging.warning(f"SpeechAccumulator: pending span chopped away, dropping {self._pending}")
            self._pending = None
        elif self._pending.start < 0:
            self._pending.set_start(0)

    def take_pending(self) -> Optional[FrameRange]:
        """Remove and return the pending span (ACCUMULATING → IDLE)."""
        pending = self._pending
        self._pending = None
        return pending

    def reset(self) -> None:
        """Drop the pending span without flushing it."""
        self._pending = None
