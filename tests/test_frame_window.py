# tests/test_frame_window.py
import pytest
from speechseg.SegmenterConfig import SegmenterConfig
from speechseg.sound.FrameWindow import FrameWindow
from speechseg.types import FrameRange
from tests.frame_fixture import make_frame, make_frames


class TestFrameWindow:
    """Tests for the oldest-first frame buffer and its chop/trim operations."""

    def test_append_keeps_order(self, window_factory):
        window = window_factory('x.x')

        assert len(window) == 3
        assert [f.sample_time for f in window] == [0, 160, 320]

    @pytest.mark.parametrize("count", [0, 1, 5, 9, 10, 11, 50])
    def test_chop_front_never_leaves_stale_indices(self, window_factory, count):
        window = window_factory('x' * 10)

        dropped = window.chop_front(count)

        assert dropped == min(count, 10)
        assert len(window) == 10 - dropped
        for i in range(len(window)):
            assert window[i] is not None
        with pytest.raises(IndexError):
            window[len(window)]

    def test_chop_front_drops_oldest(self, window_factory):
        window = window_factory('x' * 10)

        window.chop_front(4)

        assert window[0] == make_frame(4)

    def test_chop_front_negative_is_noop(self, window_factory):
        window = window_factory('xxx')

        assert window.chop_front(-2) == 0
        assert len(window) == 3

    def test_negative_index_rejected(self, window_factory):
        window = window_factory('xxx')

        with pytest.raises(IndexError):
            window[-1]

    def test_frames_is_inclusive_and_clamped(self, window_factory):
        window = window_factory('xxxxx')

        assert [f.sample_time for f in window.frames(FrameRange(1, 3))] == [160, 320, 480]
        assert len(window.frames(FrameRange(3, 20))) == 2
        assert window.frames(FrameRange(4, 2)) == []

    def test_clear_releases_frames(self, window_factory):
        window = window_factory('xxxxx')

        window.clear()

        assert len(window) == 0


class TestIdleTrim:
    """Idle trim drops leading silence once the window reaches high water."""

    def test_trims_to_first_speech_in_scan_range(self, window_factory):
        window = window_factory('.' * 20 + 'x' + '.' * 79)

        dropped = window.try_trim_silence_prefix(span_pending=False)

        assert dropped == 20
        assert len(window) == 80
        assert window[0] == make_frame(20)

    def test_does_not_run_below_high_water(self, window_factory):
        window = window_factory('.' * 20 + 'x' + '.' * 78)

        assert window.try_trim_silence_prefix(span_pending=False) == 0
        assert len(window) == 99

    def test_never_runs_while_span_pending(self, window_factory):
        window = window_factory('.' * 20 + 'x' + '.' * 179)

        assert window.try_trim_silence_prefix(span_pending=True) == 0
        assert len(window) == 200

    def test_leading_frames_below_scan_start_are_ignored(self, window_factory):
        """Speech in the first trim_scan_start frames does not stop the scan."""
        window = window_factory('x' * 10 + '.' * 5 + 'x' + '.' * 84)

        assert window.try_trim_silence_prefix(span_pending=False) == 15

    def test_no_speech_in_scan_range_drops_scanned_silence(self, window_factory):
        window = window_factory('.' * 51 + 'x' * 49)

        assert window.try_trim_silence_prefix(span_pending=False) == 51
        assert len(window) == 49
        assert window[0] == make_frame(51)

    def test_all_silent_window_is_trimmed(self, window_factory):
        window = window_factory('.' * 100)

        assert window.try_trim_silence_prefix(span_pending=False) == 51
        assert len(window) == 49

    def test_scan_end_is_inclusive(self, window_factory):
        window = window_factory('.' * 50 + 'x' * 50)

        assert window.try_trim_silence_prefix(span_pending=False) == 50

    def test_tightened_thresholds(self):
        config = SegmenterConfig(high_water=6, trim_scan_start=1, trim_scan_end=3)
        window = FrameWindow(config)
        for frame in make_frames('..x...'):
            window.append(frame)

        assert window.try_trim_silence_prefix(span_pending=False) == 2
        assert len(window) == 4
