# tests/test_range_splitter.py
import pytest
from speechseg.SegmenterConfig import SegmenterConfig
from speechseg.sound.RangeSplitter import RangeSplitter
from speechseg.types import FrameRange

PATTERNS = [
    'xxxxxxxxxx',
    '..xxx....x',
    '....x.....',
    '..........',
    'x........x',
    'xx....xx....xx',
    'x.x.x.x.x.x',
    '...xx...',
]


@pytest.fixture
def splitter(seg_config):
    return RangeSplitter(seg_config)


class TestTrimSilence:

    def test_strips_leading_and_trailing_silence(self, splitter, window_factory):
        window = window_factory('..xxx..')

        assert splitter.trim_silence(FrameRange(0, 6), window) == (2, 4)

    def test_does_not_modify_input(self, splitter, window_factory):
        window = window_factory('..xxx..')
        r = FrameRange(0, 6)

        splitter.trim_silence(r, window)

        assert r == (0, 6)

    def test_all_silent_collapses_to_end(self, splitter, window_factory):
        window = window_factory('.....')

        trimmed = splitter.trim_silence(FrameRange(0, 4), window)

        assert trimmed == (4, 4)
        assert trimmed.invalid is True

    def test_end_clamped_to_window(self, splitter, window_factory):
        window = window_factory('xx..')

        assert splitter.trim_silence(FrameRange(0, 10), window) == (0, 1)

    def test_reversed_range_returned_unchanged(self, splitter, window_factory):
        window = window_factory('xxxx')

        assert splitter.trim_silence(FrameRange(3, 1), window) == (3, 1)

    @pytest.mark.parametrize("pattern", PATTERNS)
    def test_idempotent(self, splitter, window_factory, pattern):
        window = window_factory(pattern)
        last = len(pattern) - 1
        for start in range(len(pattern)):
            for end in range(start, last + 1):
                once = splitter.trim_silence(FrameRange(start, end), window)
                twice = splitter.trim_silence(once, window)
                assert twice == once, f"pattern={pattern} range=({start}, {end})"


class TestSplitOnGaps:

    def test_splits_on_four_empty_frames(self, splitter, window_factory):
        """Frames 2-4 speech, 5-8 silence, 9 speech: two sub-ranges."""
        window = window_factory('..xxx....x')

        sub_ranges = splitter.split_on_gaps(FrameRange(2, 9), window)

        assert sub_ranges == [(2, 4), (9, 9)]

    def test_single_frame_tail_is_invalid(self, splitter, window_factory):
        window = window_factory('..xxx....x')

        sub_ranges = splitter.split_on_gaps(FrameRange(2, 9), window)

        assert sub_ranges[0].invalid is False
        assert sub_ranges[1].invalid is True

    def test_short_run_does_not_split(self, splitter, window_factory):
        window = window_factory('xx...xx')

        assert splitter.split_on_gaps(FrameRange(0, 6), window) == [(0, 6)]

    def test_multiple_splits(self, splitter, window_factory):
        window = window_factory('xx....xx....xx')

        assert splitter.split_on_gaps(FrameRange(0, 13), window) == [(0, 1), (6, 7), (12, 13)]

    def test_range_is_trimmed_before_splitting(self, splitter, window_factory):
        window = window_factory('...xx.....xx...')

        assert splitter.split_on_gaps(FrameRange(0, 14), window) == [(3, 4), (10, 11)]

    def test_three_frames_or_fewer_unsplit(self, splitter, window_factory):
        window = window_factory('.x.x')

        assert splitter.split_on_gaps(FrameRange(0, 3), window) == [(1, 3)]

    def test_reversed_range_yields_nothing(self, splitter, window_factory):
        window = window_factory('xxxxxx')

        assert splitter.split_on_gaps(FrameRange(4, 1), window) == []

    def test_short_tail_merges_when_enabled(self, window_factory):
        splitter = RangeSplitter(SegmenterConfig(split_tail_merge=2))
        window = window_factory('..xxx....x')

        assert splitter.split_on_gaps(FrameRange(2, 9), window) == [(2, 9)]

    def test_tightened_split_gap(self, window_factory):
        splitter = RangeSplitter(SegmenterConfig(split_gap=2))
        window = window_factory('xx..xx')

        assert splitter.split_on_gaps(FrameRange(0, 5), window) == [(0, 1), (4, 5)]

    @pytest.mark.parametrize("pattern", PATTERNS)
    def test_sub_ranges_disjoint_and_cover_trimmed_speech(self, splitter, window_factory, pattern):
        window = window_factory(pattern)
        full = FrameRange(0, len(pattern) - 1)
        trimmed = splitter.trim_silence(full, window)

        sub_ranges = splitter.split_on_gaps(full, window)

        covered = []
        for sub_range in sub_ranges:
            covered.extend(sub_range.indices())
        assert covered == sorted(set(covered)), "sub-ranges overlap or are out of order"
        assert set(covered) <= set(trimmed.indices())
        for i in set(trimmed.indices()) - set(covered):
            assert window[i].is_empty, f"speech frame {i} dropped for pattern {pattern}"
