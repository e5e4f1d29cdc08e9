# speechseg/sound/SegmentationEngine.py
"""
Tests for this module:
- tests/test_segmentation_engine.py - Frame/verdict handling, flush paths, memory bounds
"""
from __future__ import annotations
import logging
from typing import List, Optional, Tuple, Union
from ..SegmenterConfig import SegmenterConfig
from ..protocols import FormatConverter, SpeechSegmentSubscriber
from ..types import (
    AccumulatorState, AudioFrame, ClassificationVerdict, FrameRange, SpeechSegment, TimeInterval
)
from .ClassificationCorrelator import ClassificationCorrelator
from .FrameWindow import FrameWindow
from .Pcm16Converter import Pcm16Converter
from .RangeSplitter import RangeSplitter
from .SegmentEmitter import SegmentEmitter
from .SpeechAccumulator import SpeechAccumulator


class SegmentationEngine:
    """Streaming speech segmentation over a window of captured frames.

    Reconciles local per-frame loudness with delayed, interval-based
    classifier verdicts and keeps the frame window bounded.

    Frame path (on_frame_captured):
    - Append the frame to the window
    - Span pending and tail more than stale_span frames past it: force flush
    - No span pending: try to trim leading idle silence

    Verdict path (on_classification):
    - Correlate the verdict to an index range (dropped if rejected or unmappable)
    - Feed the range to the accumulator; a returned span is flushed

    Flush (forced or explicit) emits the span, resets the accumulator to IDLE
    and chops the window up to the span's end. A gap flush emits the old span,
    then chops up to the new span's start and re-bases it to index 0.

    Not thread-safe: all calls must be serialized (see StreamProcessor).

    Args:
        config: SegmenterConfig with all thresholds
        converter: Format converter for emitted frames (default: Pcm16Converter)
        subscribers: Transport subscribers receiving segments
        verbose: Enable verbose logging
    """

    def __init__(self,
                 config: Optional[SegmenterConfig] = None,
                 converter: Optional[FormatConverter] = None,
                 subscribers: Optional[List[SpeechSegmentSubscriber]] = None,
                 verbose: bool = False):
        self.config: SegmenterConfig = config or SegmenterConfig()
        self.verbose: bool = verbose

        self.window: FrameWindow = FrameWindow(self.config, verbose=verbose)
        self.correlator: ClassificationCorrelator = ClassificationCorrelator(self.config, verbose=verbose)
        self.splitter: RangeSplitter = RangeSplitter(self.config, verbose=verbose)
        self.accumulator: SpeechAccumulator = SpeechAccumulator(self.config, self.splitter, verbose=verbose)
        self.emitter: SegmentEmitter = SegmentEmitter(
            converter=converter or Pcm16Converter(),
            splitter=self.splitter,
            subscribers=subscribers,
            verbose=verbose
        )

    @property
    def state(self) -> AccumulatorState:
        return self.accumulator.state

    @property
    def pending(self) -> Optional[FrameRange]:
        return self.accumulator.pending

    def on_frame_captured(self, frame: AudioFrame) -> List[SpeechSegment]:
        """Append a captured frame and run the memory valves.

        Args:
            frame: Newly captured AudioFrame

        Returns:
            Segments emitted by a stale-span flush (usually empty)
        """
        self.window.append(frame)

        if self.accumulator.is_pending:
            return self.force_flush_if_stale()

        self.window.try_trim_silence_prefix(span_pending=False)
        return []

    def on_classification(self,
                          interval: Union[TimeInterval, Tuple[float, float]],
                          confidence: float,
                          label: str) -> List[SpeechSegment]:
        """Handle a classifier verdict.

        Args:
            interval: TimeInterval, or (start, end) media-time bounds in seconds
            confidence: Classifier confidence for label
            label: Classifier's top label

        Returns:
            Segments emitted because the verdict closed the pending span
        """
        if not isinstance(interval, TimeInterval):
            start, end = interval
            interval = TimeInterval.from_bounds(start, end)
        return self.on_verdict(ClassificationVerdict(interval=interval, confidence=confidence, label=label))

    def on_verdict(self, verdict: ClassificationVerdict) -> List[SpeechSegment]:
        """Same as on_classification, for an already-built verdict."""
        frame_range = self.correlator.correlate(verdict, self.window)
        if frame_range is None:
            return []

        flushed = self.accumulator.on_range(frame_range, self.window)
        if flushed is None:
            return []

        segments = self.emitter.emit(flushed, self.window)
        # The new span becomes index 0; everything before it is released
        dropped = self.window.chop_front(frame_range.start)
        self.accumulator.rebase(dropped)
        if self.verbose:
            logging.debug(
                f"SegmentationEngine: gap flush of {flushed}, chopped {dropped} frames, "
                f"pending {self.accumulator.pending}"
            )
        return segments

    def force_flush_if_stale(self) -> List[SpeechSegment]:
        """Backpressure valve: flush a pending span the classifier never closed."""
        if not self.accumulator.is_stale(len(self.window)):
            return []
        if self.verbose:
            logging.debug(
                f"SegmentationEngine: pending span {self.accumulator.pending} is stale "
                f"(window={len(self.window)}), forcing flush"
            )
        return self.flush()

    def flush(self) -> List[SpeechSegment]:
        """Emit the pending span, return to IDLE and reclaim the flushed frames."""
        span = self.accumulator.take_pending()
        if span is None:
            return []

        segments = self.emitter.emit(span, self.window)
        dropped = self.window.chop_front(span.end)
        logging.info(
            f"SegmentationEngine: flushed {span}, chopped {dropped} frames, "
            f"{len(self.window)} left"
        )
        return segments

    def reset(self) -> None:
        """Discard the pending span and release every buffered frame."""
        self.accumulator.reset()
        self.window.clear()
        if self.verbose:
            logging.debug("SegmentationEngine: reset()")
