# tests/conftest.py
import pytest
from speechseg.SegmenterConfig import SegmenterConfig
from speechseg.sound.FrameWindow import FrameWindow
from tests.frame_fixture import SAMPLE_RATE, make_frames


@pytest.fixture
def seg_config():
    """Default segmentation thresholds."""
    return SegmenterConfig()


@pytest.fixture
def window_factory(seg_config):
    """Create a FrameWindow pre-filled from a pattern string ('x' speech, '.' silence)."""
    def _make(pattern='', config=None):
        window = FrameWindow(config or seg_config)
        for frame in make_frames(pattern):
            window.append(frame)
        return window
    return _make


@pytest.fixture
def config():
    """Application configuration dictionary matching config/segmenter_config.json."""
    return {
        'audio': {
            'sample_rate': SAMPLE_RATE,
            'chunk_duration': 0.032,
            'queue_size': 200
        },
        'segmentation': {},
        'classifier': {
            'model_path': 'silero_vad/silero_vad.onnx',
            'threshold': 0.5,
            'window_frames': 3,
            'queue_size': 100
        },
        'output': {
            'output_dir': None,
            'publish_raw_frames': False
        }
    }
