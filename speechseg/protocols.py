"""Protocol definitions for speech segmentation collaborators.

This module defines structural interfaces using Python's Protocol for duck typing.
"""

from typing import Protocol
from speechseg.types import AudioFrame, RawFrame, RecorderStatus, SpeechSegment


class SpeechSegmentSubscriber(Protocol):
    """Subscriber interface for segmentation output events.

    Components implementing this protocol receive finalized speech segments
    and lifecycle notifications. The protocol uses structural subtyping,
    so classes don't need explicit inheritance - just matching method signatures.

    Thread Safety:
        Implementations must handle calls from background threads.
        StreamProcessor invokes these methods from its daemon thread.
    """

    def on_speech_segment(self, segment: SpeechSegment) -> None:
        """Handle a finalized speech segment.

        Args:
            segment: SpeechSegment with concatenated frame bytes
        """
        ...

    def on_raw_frame(self, frame: RawFrame) -> None:
        """Handle a non-empty frame published ahead of segmentation.

        Only called when raw frame publishing is enabled.

        Args:
            frame: RawFrame with the frame's converted bytes
        """
        ...

    def on_status(self, status: RecorderStatus) -> None:
        """Handle a recorder lifecycle change."""
        ...


class FormatConverter(Protocol):
    """Pure conversion of a frame's samples to the canonical byte encoding."""

    def convert(self, frame: AudioFrame) -> bytes:
        ...


class SpeechClassifier(Protocol):
    """Asynchronous speech classifier fed one frame at a time.

    Verdicts are delivered out of band (typically into the StreamProcessor
    input queue) and may lag the submitted audio arbitrarily.
    """

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...

    def submit(self, frame: AudioFrame) -> None:
        ...

    def pending(self) -> int:
        """Number of submitted frames whose verdict has not been delivered yet."""
        ...
