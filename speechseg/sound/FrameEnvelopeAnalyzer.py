# speechseg/sound/FrameEnvelopeAnalyzer.py
import time
import numpy as np
from typing import Optional
from ..SegmenterConfig import SegmenterConfig
from ..types import AudioFrame


class FrameEnvelopeAnalyzer:
    """Tags captured buffers with a loudness value and an emptiness flag.

    Loudness is the peak of an asymmetric envelope follower run over the
    rectified samples:
    - sample above envelope: envelope += attack * (sample - envelope)
    - otherwise:             envelope += decay * (sample - envelope)

    The envelope starts at 0 for every buffer, so the result depends only on
    the buffer itself. This is a cheap "plausibly silence" proxy used to trim
    and split classifier ranges, not a voice activity detector.

    Args:
        config: SegmenterConfig with silence threshold and envelope coefficients
    """

    def __init__(self, config: SegmenterConfig):
        self.silence_threshold: float = config.silence_threshold
        self.attack: float = config.envelope_attack
        self.decay: float = config.envelope_decay

    def compute_volume(self, samples: np.ndarray) -> float:
        """Return the peak envelope value reached across the buffer.

        Args:
            samples: Mono audio samples (float, nominally in [-1, 1])

        Returns:
            Peak envelope value, 0.0 for an empty buffer
        """
        if samples is None or len(samples) == 0:
            return 0.0

        rectified = np.abs(np.asarray(samples, dtype=np.float64))
        attack = self.attack
        decay = self.decay
        envelope = 0.0
        peak = 0.0
        for sample in rectified.tolist():
            if envelope < sample:
                envelope += attack * (sample - envelope)
            else:
                envelope += decay * (sample - envelope)
            if envelope > peak:
                peak = envelope
        return peak

    def analyze(self,
                samples: np.ndarray,
                sample_time: int,
                sample_rate: int,
                recorded_time: Optional[int] = None) -> AudioFrame:
        """Build an AudioFrame from one captured buffer.

        Args:
            samples: Captured samples; for multi-channel input the first channel is used
            sample_time: Sample-clock position of the first sample
            sample_rate: Capture sample rate in Hz
            recorded_time: Wall-clock capture time in ms; defaults to now

        Returns:
            AudioFrame with volume and is_empty populated
        """
        mono = np.asarray(samples)
        if mono.ndim > 1:
            mono = mono[:, 0]
        mono = mono.astype(np.float32, copy=False)

        if recorded_time is None:
            recorded_time = int(time.time() * 1000)

        volume = self.compute_volume(mono)
        return AudioFrame(
            samples=mono,
            sample_time=int(sample_time),
            sample_rate=int(sample_rate),
            recorded_time=int(recorded_time),
            volume=volume,
            is_empty=volume <= self.silence_threshold,
        )
