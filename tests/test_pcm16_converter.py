# tests/test_pcm16_converter.py
import numpy as np
from speechseg.sound.Pcm16Converter import Pcm16Converter
from tests.frame_fixture import make_frame


class TestPcm16Converter:

    def test_two_bytes_per_sample(self):
        data = Pcm16Converter().convert(make_frame(0))

        assert len(data) == 160 * Pcm16Converter.sample_width

    def test_little_endian_full_scale(self):
        data = Pcm16Converter().convert_samples(np.array([1.0, -1.0, 0.0], dtype=np.float32))

        assert data == b'\xff\x7f\x01\x80\x00\x00'

    def test_out_of_range_samples_are_clipped(self):
        data = Pcm16Converter().convert_samples(np.array([3.0, -7.5], dtype=np.float32))

        assert list(Pcm16Converter.to_samples(data)) == [32767, -32767]
