"""Sound subsystem - loudness analysis and segmentation.

Capture sources (AudioSource, FileAudioSource) are imported from their own
modules so that the engine does not require an audio device library.
"""
from speechseg.sound.FrameEnvelopeAnalyzer import FrameEnvelopeAnalyzer
from speechseg.sound.FrameWindow import FrameWindow
from speechseg.sound.Pcm16Converter import Pcm16Converter
from speechseg.sound.SegmentationEngine import SegmentationEngine

__all__ = ['FrameEnvelopeAnalyzer', 'FrameWindow', 'Pcm16Converter', 'SegmentationEngine']
