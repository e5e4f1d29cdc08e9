# speechseg/sound/RangeSplitter.py
import logging
from typing import List
from ..SegmenterConfig import SegmenterConfig
from ..types import FrameRange
from .FrameWindow import FrameWindow


class RangeSplitter:
    """Trims silent edges off a span and splits it on long internal pauses.

    A classifier interval can straddle a real pause between two utterances.
    Splitting on runs of split_gap (e.g. 4) or more empty frames keeps the
    utterances apart, while shorter pauses stay inside one segment.

    Args:
        config: SegmenterConfig with split_gap and split_tail_merge
        verbose: Enable verbose logging
    """

    def __init__(self, config: SegmenterConfig, verbose: bool = False):
        self.split_gap: int = config.split_gap
        self.split_tail_merge: int = config.split_tail_merge
        self.verbose: bool = verbose

    def trim_silence(self, frame_range: FrameRange, window: FrameWindow) -> FrameRange:
        """Return a copy of the range without leading and trailing empty frames.

        Start advances over empty frames but never past end; end then retreats
        over empty frames but never before the new start. A fully silent range
        collapses to [end, end], which reports invalid. A reversed range is
        returned unchanged.

        Args:
            frame_range: Inclusive range over window
            window: Window the range indexes into

        Returns:
            New FrameRange; the input is not modified
        """
        start = frame_range.start
        end = min(frame_range.end, len(window) - 1)
        if start > end or start < 0:
            return frame_range.copy()

        new_start = start
        for i in range(start, end + 1):
            if not window[i].is_empty:
                break
            new_start = i if i == end else i + 1

        new_end = end
        for i in range(end, new_start - 1, -1):
            if not window[i].is_empty:
                break
            new_end = i if i == new_start else i - 1

        trimmed = FrameRange(new_start, new_end)
        if self.verbose:
            logging.debug(f"RangeSplitter: trim_silence {frame_range} -> {trimmed}")
        return trimmed

    def split_on_gaps(self, frame_range: FrameRange, window: FrameWindow) -> List[FrameRange]:
        """Split a span into sub-ranges separated by long silent runs.

        Algorithm:
        1. Trim silent edges; a reversed result yields no sub-ranges
        2. Three frames or fewer: return the trimmed range unsplit
        3. Count consecutive empty frames; when a run of split_gap or more is
           broken by a non-empty frame, close the current sub-range at the last
           non-empty frame before the run and open a new one at that frame
        4. Append the open sub-range, or merge it into the previous one when it
           holds fewer than split_tail_merge frames

        Sub-ranges never overlap and exclude the gap frames.

        Args:
            frame_range: Inclusive range over window
            window: Window the range indexes into

        Returns:
            Ordered list of sub-ranges (may contain single-frame ranges, which report invalid)
        """
        trimmed = self.trim_silence(frame_range, window)
        if trimmed.start > trimmed.end:
            return []
        if trimmed.amount <= 3:
            return [trimmed]

        sub_ranges: List[FrameRange] = []
        sub_start = trimmed.start
        empty_run = 0
        for i in trimmed.indices():
            if window[i].is_empty:
                empty_run += 1
                continue
            if empty_run >= self.split_gap:
                sub_ranges.append(FrameRange(sub_start, i - empty_run - 1))
                sub_start = i
            empty_run = 0

        tail = FrameRange(sub_start, trimmed.end)
        if sub_ranges and tail.amount < self.split_tail_merge:
            sub_ranges[-1].set_end(tail.end)
        else:
            sub_ranges.append(tail)

        if self.verbose and len(sub_ranges) > 1:
            logging.debug(f"RangeSplitter: split {trimmed} into {sub_ranges}")
        return sub_ranges
