"""Type definitions for the speech segmentation pipeline and its queue messages."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union
import numpy as np
import numpy.typing as npt


class AccumulatorState(Enum):
    """State machine states for speech span accumulation.

    State Transitions:
    - IDLE: No span pending, window may self-trim leading silence
    - ACCUMULATING: A correlated speech span is pending emission

    Transition Rules:
    IDLE → ACCUMULATING: First correlated speech range
    ACCUMULATING → ACCUMULATING: Range extends the span, or a gap flushes it and starts a new one
    ACCUMULATING → IDLE: Stale-span valve or explicit flush
    """
    IDLE = auto()
    ACCUMULATING = auto()


class RecorderStatus(Enum):
    """Lifecycle status published to subscribers by the pipeline."""
    INITIALIZED = 'initialized'
    RECORDING = 'recording'
    STOPPED = 'stopped'


@dataclass(frozen=True, eq=False)
class AudioFrame:
    """One captured buffer tagged with its loudness.

    Frames are identified by their sample-clock position: two frames are
    equal iff ``sample_time`` matches.

    Attributes:
        samples: Mono float32 samples as captured
        sample_time: Sample-clock position of the first sample
        sample_rate: Capture sample rate in Hz
        recorded_time: Wall-clock capture time, milliseconds since epoch
        volume: Peak envelope value (see FrameEnvelopeAnalyzer)
        is_empty: True when volume is at or below the silence threshold
    """
    samples: npt.NDArray[np.float32]
    sample_time: int
    sample_rate: int
    recorded_time: int
    volume: float
    is_empty: bool

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AudioFrame):
            return NotImplemented
        return self.sample_time == other.sample_time

    def __hash__(self) -> int:
        return hash(self.sample_time)

    @property
    def media_time(self) -> float:
        """Frame start on the media timeline, in seconds."""
        return self.sample_time / self.sample_rate

    @property
    def num_samples(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        return self.num_samples / self.sample_rate

    @property
    def end_media_time(self) -> float:
        return self.media_time + self.duration


class FrameRange:
    """Inclusive [start, end] index range over a FrameWindow.

    Ranges are mutable so an in-flight span can be extended in place.
    Indices are relative to the window they were derived from; after a chop
    the owner re-bases them with shift().
    """

    def __init__(self, start: int = 0, end: int = 0):
        self._start = start
        self._end = end

    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int:
        return self._end

    @property
    def amount(self) -> int:
        """Number of frames covered."""
        return self._end - self._start + 1

    @property
    def unset(self) -> bool:
        return self._start == 0 and self._end == 0

    @property
    def invalid(self) -> bool:
        return self._start >= self._end

    def set_range(self, start: int, end: int) -> None:
        self._start = start
        self._end = end

    def set_start(self, start: int) -> None:
        self._start = start

    def set_end(self, end: int) -> None:
        self._end = end

    def reset(self) -> None:
        self._start = 0
        self._end = 0

    def shift(self, offset: int) -> None:
        """Move both bounds by offset (negative after the window was chopped)."""
        self._start += offset
        self._end += offset

    def copy(self) -> 'FrameRange':
        return FrameRange(self._start, self._end)

    def indices(self) -> range:
        return range(self._start, self._end + 1)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FrameRange):
            return (self._start, self._end) == (other._start, other._end)
        if isinstance(other, tuple):
            return (self._start, self._end) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._start, self._end))

    def __repr__(self) -> str:
        return f"({self._start}, {self._end})"


@dataclass(frozen=True)
class TimeInterval:
    """Half-open media-time interval [start, start + duration) in seconds."""
    start: float
    duration: float

    @classmethod
    def from_bounds(cls, start: float, end: float) -> 'TimeInterval':
        return cls(start=start, duration=end - start)

    @property
    def end(self) -> float:
        return self.start + self.duration

    def contains(self, media_time: float) -> bool:
        return self.start <= media_time < self.end


@dataclass(frozen=True)
class ClassificationVerdict:
    """Classifier output: a media-time interval with its top label.

    Also used as a StreamProcessor input message.
    """
    interval: TimeInterval
    confidence: float
    label: str


@dataclass
class CapturedAudio:
    """Raw buffer from a capture source, before loudness analysis.

    StreamProcessor input message; analysis happens on the processing thread
    so the capture callback stays minimal.
    """
    samples: npt.NDArray[np.float32]
    sample_time: int
    sample_rate: int
    recorded_time: int


# Type alias for StreamProcessor input_queue items
ProcessorMessage = Union[CapturedAudio, ClassificationVerdict]


@dataclass
class SpeechSegment:
    """Finalized speech segment handed to the transport.

    Attributes:
        data: Concatenated canonical encoding of every frame in the segment
        recorded_time: Capture timestamp (ms since epoch) of the first frame
        sample_time: Sample-clock position of the first frame
        end_sample_time: Sample-clock position just past the last frame
        sample_rate: Sample rate of the captured frames
        frame_count: Number of frames concatenated into data
    """
    data: bytes
    recorded_time: int
    sample_time: int
    end_sample_time: int
    sample_rate: int
    frame_count: int = field(default=1)

    def __post_init__(self):
        """Validate that the segment covers at least one frame."""
        if self.frame_count < 1:
            raise ValueError("SpeechSegment must cover at least one frame")

    @property
    def start_time(self) -> float:
        return self.sample_time / self.sample_rate

    @property
    def end_time(self) -> float:
        return self.end_sample_time / self.sample_rate


@dataclass
class RawFrame:
    """Converted non-empty frame published as soon as it is captured."""
    data: bytes
    recorded_time: int
    sample_time: int
