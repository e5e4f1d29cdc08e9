# speechseg/sound/AudioSource.py
from __future__ import annotations
import sounddevice as sd
import queue
import numpy as np
import time
import logging
from typing import Dict, Any
from ..types import CapturedAudio


class AudioSource:
    """Captures audio from the microphone and emits raw buffers to a queue.

    AudioSource uses sounddevice to capture real-time audio and immediately
    puts each block into input_queue as a CapturedAudio message. No processing
    is done in the callback to prevent blocking and audio dropouts; loudness
    analysis and segmentation happen on the StreamProcessor thread.

    The sample clock is a running count of captured samples, so sample_time
    is monotonic and gap-free regardless of wall-clock jitter.

    Args:
        input_queue: Queue to send CapturedAudio messages
        config: Configuration dictionary loaded from segmenter_config.json
        verbose: Enable verbose logging
    """

    def __init__(self,
                 input_queue: queue.Queue,
                 config: Dict[str, Any],
                 verbose: bool = False):

        self.input_queue: queue.Queue = input_queue
        self.verbose: bool = verbose

        self.sample_rate: int = config['audio']['sample_rate']
        chunk_duration = config['audio']['chunk_duration']

        self.chunk_size: int = int(self.sample_rate * chunk_duration)
        self.device = config['audio'].get('device')
        self.sample_clock: int = 0
        self.dropped_chunks: int = 0
        self.is_running: bool = False
        self.stream: sd.InputStream | None = None


    def audio_callback(self, indata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        """Callback from sounddevice that forwards incoming audio data.

        Strip stereo, take 1st channel. The sample clock advances even when
        the queue is full so later buffers keep their true position.

        Args:
            indata: Input audio data as numpy array (shape: [frames, channels])
            frames: Number of audio frames
            time_info: Timing information from sounddevice
            status: Status information from sounddevice
        """
        if status:
            logging.error(f"Audio error: {status}")

        audio_float: np.ndarray = indata[:, 0].astype(np.float32)
        captured = CapturedAudio(
            samples=audio_float,
            sample_time=self.sample_clock,
            sample_rate=self.sample_rate,
            recorded_time=int(time.time() * 1000)
        )
        self.sample_clock += frames

        try:
            self.input_queue.put_nowait(captured)
        except queue.Full:
            self.dropped_chunks += 1
            logging.warning(f"input_queue full, dropping audio chunk (total drops: {self.dropped_chunks})")


    def start(self) -> None:
        """Start capturing audio from the microphone.

        Creates and starts a sounddevice InputStream that will begin
        capturing audio and calling the audio_callback method.
        """
        self.is_running = True
        self.sample_clock = 0
        self.stream = sd.InputStream(
            samplerate=self.sample_rate,
            channels=1,
            device=self.device,
            callback=self.audio_callback,
            blocksize=self.chunk_size
        )
        self.stream.start()
        if self.verbose:
            logging.info(f"AudioSource: capturing {self.chunk_size} samples per block at {self.sample_rate} Hz")


    def stop(self) -> None:
        """Stop capturing and release the microphone."""
        self.is_running = False
        if self.stream:
            self.stream.stop()
            self.stream.close()
            self.stream = None
