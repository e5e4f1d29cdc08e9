# speechseg/sound/ClassificationCorrelator.py
import logging
from typing import Optional
from ..SegmenterConfig import SegmenterConfig
from ..types import ClassificationVerdict, FrameRange
from .FrameWindow import FrameWindow


class ClassificationCorrelator:
    """Maps classifier verdicts onto contiguous index ranges of the window.

    Algorithm:
    1. Discard verdicts with confidence <= min_confidence or a non-speech label
    2. Scan the window oldest to newest
    3. First frame whose media_time lies inside the interval starts the range
    4. Range end follows while frames stay inside the interval
    5. Stop at the first frame outside the interval once a start was found

    A verdict that covers no buffered frame (e.g. the frames were already
    chopped) is unmappable and dropped.

    Args:
        config: SegmenterConfig with min_confidence and speech_label
        verbose: Enable verbose logging
    """

    def __init__(self, config: SegmenterConfig, verbose: bool = False):
        self.min_confidence: float = config.min_confidence
        self.speech_label: str = config.speech_label
        self.verbose: bool = verbose
        self.unmappable_verdicts: int = 0

    def accepts(self, verdict: ClassificationVerdict) -> bool:
        """Check whether a verdict asserts speech with enough confidence."""
        return verdict.confidence > self.min_confidence and verdict.label == self.speech_label

    def correlate(self, verdict: ClassificationVerdict, window: FrameWindow) -> Optional[FrameRange]:
        """Locate the frames covered by an accepted verdict.

        Args:
            verdict: Classifier verdict
            window: Current frame window

        Returns:
            Inclusive FrameRange, or None when the verdict is discarded or unmappable
        """
        if not self.accepts(verdict):
            return None

        interval = verdict.interval
        start: Optional[int] = None
        end: Optional[int] = None
        for idx, frame in enumerate(window):
            if interval.contains(frame.media_time):
                if start is None:
                    start = idx
                end = idx
            elif start is not None:
                break

        if start is None:
            self.unmappable_verdicts += 1
            if self.verbose:
                logging.debug(
                    f"ClassificationCorrelator: speech found but no buffered frame in "
                    f"[{interval.start:.3f}, {interval.end:.3f}) (window={len(window)})"
                )
            return None

        frame_range = FrameRange(start, end)
        if self.verbose:
            logging.debug(f"ClassificationCorrelator: speech found at {frame_range}")
        return frame_range
