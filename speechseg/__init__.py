# speechseg/__init__.py
from .SegmenterConfig import SegmenterConfig, load_config
from .sound.SegmentationEngine import SegmentationEngine
from .types import (
    AccumulatorState,
    AudioFrame,
    ClassificationVerdict,
    FrameRange,
    RecorderStatus,
    SpeechSegment,
    TimeInterval,
)

__all__ = [
    'SegmenterConfig',
    'load_config',
    'SegmentationEngine',
    'AccumulatorState',
    'AudioFrame',
    'ClassificationVerdict',
    'FrameRange',
    'RecorderStatus',
    'SpeechSegment',
    'TimeInterval',
]
