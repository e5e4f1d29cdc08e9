# speechseg/sound/SegmentEmitter.py
import logging
from typing import List, Optional
from ..protocols import FormatConverter, SpeechSegmentSubscriber
from ..types import AudioFrame, FrameRange, RawFrame, RecorderStatus, SpeechSegment
from .FrameWindow import FrameWindow
from .RangeSplitter import RangeSplitter


def _format_range(frame_range: FrameRange) -> str:
    return f"[{frame_range.start}-{frame_range.end}]"


class SegmentEmitter:
    """Turns a flushed span into SpeechSegments and hands them to subscribers.

    Emission:
    1. Split the span on long silent runs (RangeSplitter)
    2. Skip sub-ranges that report invalid; siblings are still emitted
    3. Concatenate the converted bytes of every frame in each sub-range
    4. Tag the segment with the first frame's capture time and notify subscribers

    Nothing is buffered between calls.

    Args:
        converter: Canonical byte encoder for frames
        splitter: RangeSplitter used to refine flushed spans
        subscribers: Optional initial subscribers
        verbose: Enable verbose logging
    """

    def __init__(self,
                 converter: FormatConverter,
                 splitter: RangeSplitter,
                 subscribers: Optional[List[SpeechSegmentSubscriber]] = None,
                 verbose: bool = False):
        self.converter: FormatConverter = converter
        self.splitter: RangeSplitter = splitter
        self.subscribers: List[SpeechSegmentSubscriber] = list(subscribers or [])
        self.verbose: bool = verbose
        self.skipped_ranges: int = 0

    def add_subscriber(self, subscriber: SpeechSegmentSubscriber) -> None:
        self.subscribers.append(subscriber)

    def emit(self, span: FrameRange, window: FrameWindow) -> List[SpeechSegment]:
        """Emit every valid sub-range of a flushed span.

        Args:
            span: Flushed span (indices into window)
            window: Current frame window

        Returns:
            Segments handed to subscribers, in order
        """
        segments: List[SpeechSegment] = []
        sub_ranges = self.splitter.split_on_gaps(span, window)
        if not sub_ranges:
            logging.info(f"SegmentEmitter: span {_format_range(span)} is silence only, nothing sent")
            return segments

        for sub_range in sub_ranges:
            if sub_range.invalid:
                self.skipped_ranges += 1
                logging.info(f"SegmentEmitter: skipping invalid sub-range {_format_range(sub_range)} of {span}")
                continue
            segment = self._build_segment(window.frames(sub_range))
            segments.append(segment)
            if self.verbose:
                logging.debug(
                    f"SegmentEmitter: sending {_format_range(sub_range)} "
                    f"frames={segment.frame_count}, bytes={len(segment.data)}, "
                    f"time={segment.start_time:.2f}-{segment.end_time:.2f}s"
                )
            self._notify('on_speech_segment', segment)
        return segments

    def publish_raw(self, frame: AudioFrame) -> RawFrame:
        """Convert and publish one captured frame immediately."""
        raw = RawFrame(
            data=self.converter.convert(frame),
            recorded_time=frame.recorded_time,
            sample_time=frame.sample_time,
        )
        self._notify('on_raw_frame', raw)
        return raw

    def publish_status(self, status: RecorderStatus) -> None:
        self._notify('on_status', status)

    def _build_segment(self, frames: List[AudioFrame]) -> SpeechSegment:
        first = frames[0]
        last = frames[-1]
        data = b''.join(self.converter.convert(frame) for frame in frames)
        return SpeechSegment(
            data=data,
            recorded_time=first.recorded_time,
            sample_time=first.sample_time,
            end_sample_time=last.sample_time + last.num_samples,
            sample_rate=first.sample_rate,
            frame_count=len(frames),
        )

    def _notify(self, method_name: str, payload) -> None:
        """Call method_name on every subscriber that defines it.

        A failing subscriber is logged and does not prevent delivery to the others.
        """
        for subscriber in self.subscribers:
            handler = getattr(subscriber, method_name, None)
            if handler is None:
                continue
            try:
                handler(payload)
            except Exception:
                logging.exception(f"SegmentEmitter: subscriber {type(subscriber).__name__}.{method_name} failed")
