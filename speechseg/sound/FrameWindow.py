# speechseg/sound/FrameWindow.py
import logging
from typing import Iterator, List
from ..SegmenterConfig import SegmenterConfig
from ..types import AudioFrame, FrameRange


class FrameWindow:
    """Ordered, oldest-first buffer of captured frames.

    The window is the sole owner of AudioFrame instances; everything else
    refers to frames by index. Indices are offsets into the current contents,
    so chop_front() shifts every outstanding FrameRange: the caller that
    chops re-bases the ranges it keeps (see SpeechAccumulator.rebase).

    Idle Trim Strategy:
    - Runs only while no speech span is pending
    - Runs only once the window holds high_water frames (e.g. 100)
    - Scans offsets trim_scan_start..trim_scan_end (e.g. 10..50) for the first
      non-empty frame and drops everything before it
    - No non-empty frame in the scan range: drops frames 0..trim_scan_end
    - The first trim_scan_start frames are never inspected, leaving room for a
      just-starting utterance the classifier has not reported yet

    Args:
        config: SegmenterConfig with high_water and trim scan offsets
        verbose: Enable verbose logging
    """

    def __init__(self, config: SegmenterConfig, verbose: bool = False):
        self.high_water: int = config.high_water
        self.trim_scan_start: int = config.trim_scan_start
        self.trim_scan_end: int = config.trim_scan_end
        self.verbose: bool = verbose
        self._frames: List[AudioFrame] = []

    def __len__(self) -> int:
        return len(self._frames)

    def __getitem__(self, index: int) -> AudioFrame:
        if index < 0 or index >= len(self._frames):
            raise IndexError(f"FrameWindow index {index} out of range (length {len(self._frames)})")
        return self._frames[index]

    def __iter__(self) -> Iterator[AudioFrame]:
        return iter(self._frames)

    def append(self, frame: AudioFrame) -> None:
        self._frames.append(frame)

    def frames(self, frame_range: FrameRange) -> List[AudioFrame]:
        """Frames covered by an inclusive range, clamped to the window."""
        start = max(frame_range.start, 0)
        end = min(frame_range.end, len(self._frames) - 1)
        if end < start:
            return []
        return self._frames[start:end + 1]

    def chop_front(self, count: int) -> int:
        """Drop the oldest frames.

        Args:
            count: Number of frames to drop; clamped to [0, len(window)]

        Returns:
            Number of frames actually dropped
        """
        count = max(0, min(count, len(self._frames)))
        if count:
            del self._frames[:count]
            if self.verbose:
                logging.debug(f"FrameWindow: chopped {count} frames, {len(self._frames)} left")
        return count

    def try_trim_silence_prefix(self, span_pending: bool) -> int:
        """Drop leading silence while idle to bound memory.

        Args:
            span_pending: True when the accumulator holds a pending span

        Returns:
            Number of frames dropped (0 when the trim did not run)
        """
        if span_pending or len(self._frames) < self.high_water:
            return 0

        last = min(self.trim_scan_end, len(self._frames) - 1)
        for i in range(self.trim_scan_start, last + 1):
            if not self._frames[i].is_empty:
                self.chop_front(i)
                logging.info(f"FrameWindow: trimmed the first {i} frames, {len(self._frames)} left")
                return i

        # Scan range is all silence
        dropped = self.chop_front(last + 1)
        if self.verbose:
            logging.debug(f"FrameWindow: no speech up to offset {last}, dropped {dropped} silent frames")
        return dropped

    def clear(self) -> None:
        """Release every buffered frame."""
        self._frames.clear()
