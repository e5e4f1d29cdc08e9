# speechseg/sound/FileAudioSource.py
from __future__ import annotations
import queue
import numpy as np
import time
import logging
import threading
from typing import Callable, Dict, Any, List
from ..types import CapturedAudio


class FileAudioSource:
    """File-based audio source for reproducible segmentation runs.

    FileAudioSource simulates capture by reading an audio file and feeding
    fixed-size blocks to the input queue. The interface matches AudioSource
    (start/stop methods) for drop-in replacement.

    Processing steps:
    1. Load audio file using soundfile
    2. Convert to mono if stereo (take first channel)
    3. Resample to the configured rate if needed
    4. Split into chunk_duration blocks, padding the last one
    5. Feed blocks at real-time rate, or as fast as downstream keeps up

    In fast mode the feeder shares the bounded input queue with the
    classifier's verdicts. When max_backlog is set it holds each block until
    backlog() drops below max_backlog, leaving the remaining queue slots to
    the verdicts.

    Args:
        input_queue: Queue to send CapturedAudio messages
        config: Configuration dictionary loaded from segmenter_config.json
        file_path: Path to the audio file to load
        realtime: Pace blocks at capture rate (False: blocking puts, no sleeping)
        backlog: Callable returning the number of messages still in flight
            (default: input_queue.qsize)
        max_backlog: Fast mode only: wait while backlog() >= max_backlog (None: never wait)
        verbose: Enable verbose logging
    """

    def __init__(self,
                 input_queue: queue.Queue,
                 config: Dict[str, Any],
                 file_path: str,
                 realtime: bool = True,
                 backlog: Callable[[], int] | None = None,
                 max_backlog: int | None = None,
                 verbose: bool = False):

        self.input_queue: queue.Queue = input_queue
        self.file_path: str = file_path
        self.realtime: bool = realtime
        self.backlog: Callable[[], int] = backlog or input_queue.qsize
        self.max_backlog: int | None = max_backlog
        self.verbose: bool = verbose

        self.sample_rate: int = config['audio']['sample_rate']
        chunk_duration = config['audio']['chunk_duration']
        self.chunk_size: int = int(self.sample_rate * chunk_duration)

        self.chunks: List[np.ndarray] = self._load_audio()

        self.is_running: bool = False
        self.finished: threading.Event = threading.Event()
        self.thread: threading.Thread | None = None

        if self.verbose:
            logging.info(f"FileAudioSource: loaded {len(self.chunks)} chunks from {file_path}")


    def _load_audio(self) -> List[np.ndarray]:
        """Load audio file, resample if needed, split into chunks.

        Returns:
            List of float32 chunks, each chunk_size samples long
        """
        import soundfile as sf

        audio, sr = sf.read(self.file_path, dtype='float32')

        if len(audio.shape) > 1:
            audio = audio[:, 0]

        if sr != self.sample_rate:
            from scipy import signal
            num_samples = int(len(audio) * self.sample_rate / sr)
            audio = signal.resample(audio, num_samples).astype(np.float32)

        chunks: List[np.ndarray] = []
        for i in range(0, len(audio), self.chunk_size):
            chunk = audio[i:i+self.chunk_size]

            # Pad last chunk if shorter than chunk_size
            if len(chunk) < self.chunk_size:
                chunk = np.pad(chunk, (0, self.chunk_size - len(chunk)))

            chunks.append(chunk.astype(np.float32, copy=False))

        return chunks


    def start(self) -> None:
        """Start feeding chunks to the queue from a background thread."""
        self.is_running = True
        self.finished.clear()
        self.thread = threading.Thread(target=self._feed_chunks, daemon=True)
        self.thread.start()

        if self.verbose:
            logging.info("FileAudioSource: started feeding chunks")


    def _feed_chunks(self) -> None:
        """Feed chunks with a sample clock derived from their file position."""
        chunk_duration = self.chunk_size / self.sample_rate
        start_time = time.time()

        for i, chunk in enumerate(self.chunks):
            if not self.is_running:
                break

            if self.realtime:
                # Calculate when this chunk should be sent
                sleep_time = start_time + (i * chunk_duration) - time.time()
                if sleep_time > 0:
                    time.sleep(sleep_time)

            captured = CapturedAudio(
                samples=chunk,
                sample_time=i * self.chunk_size,
                sample_rate=self.sample_rate,
                recorded_time=int(time.time() * 1000)
            )

            if self.realtime:
                try:
                    self.input_queue.put_nowait(captured)
                except queue.Full:
                    logging.warning("input_queue full, dropping chunk")
            else:
                self._wait_for_backlog()
                if not self.is_running:
                    break
                self.input_queue.put(captured)

        self.is_running = False
        self.finished.set()

        if self.verbose:
            logging.info("FileAudioSource: finished feeding all chunks")


    def _wait_for_backlog(self) -> None:
        """Hold the next block until downstream is below max_backlog."""
        if self.max_backlog is None:
            return
        while self.is_running and self.backlog() >= self.max_backlog:
            time.sleep(0.002)


    def stop(self) -> None:
        """Stop feeding chunks and wait for the feeder thread."""
        self.is_running = False

        if self.thread:
            self.thread.join(timeout=1.0)

        if self.verbose:
            logging.info("FileAudioSource: stopped")
