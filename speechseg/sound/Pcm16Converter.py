# speechseg/sound/Pcm16Converter.py
import numpy as np
from ..types import AudioFrame

INT16_SCALE = 32767


class Pcm16Converter:
    """Converts float32 frames to mono 16-bit little-endian PCM bytes.

    Samples are clipped to [-1.0, 1.0] before scaling. Stateless, so one
    instance can be shared by the emitter and the raw frame publisher.
    """

    sample_width: int = 2

    def convert(self, frame: AudioFrame) -> bytes:
        return self.convert_samples(frame.samples)

    def convert_samples(self, samples: np.ndarray) -> bytes:
        clipped = np.clip(np.asarray(samples, dtype=np.float32), -1.0, 1.0)
        return (clipped * INT16_SCALE).astype('<i2').tobytes()

    @staticmethod
    def to_samples(data: bytes) -> np.ndarray:
        """Decode PCM bytes back to an int16 array (for writers and tests)."""
        return np.frombuffer(data, dtype='<i2')
