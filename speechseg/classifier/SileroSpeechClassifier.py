# speechseg/classifier/SileroSpeechClassifier.py
import logging
import queue
import threading
from collections import deque
from pathlib import Path
from typing import Any, Deque, Dict, Optional, Tuple

import numpy as np
import onnxruntime

from ..types import AudioFrame, ClassificationVerdict, TimeInterval

# Silero VAD accepts 512-sample windows at 16 kHz and 256-sample windows at 8 kHz
MODEL_WINDOW_SIZES: Dict[int, int] = {16000: 512, 8000: 256}


class SileroSpeechClassifier:
    """Asynchronous speech classifier backed by the Silero VAD ONNX model.

    Frames submitted from the processing thread are analyzed on a dedicated
    daemon thread, so verdicts arrive late and out of band, like any external
    classifier. The classifier only reads frame samples and never touches the
    frame window.

    Verdict Strategy:
    - Each frame is cut into model windows; the frame probability is the
      maximum window probability (ONNX state carries across windows and frames)
    - A sliding analysis window holds the last window_frames frames
    - One verdict per analyzed frame covers the media time of the whole
      analysis window, with confidence = mean frame probability
    - label is 'speech' when confidence > threshold, otherwise 'silence'

    Args:
        verdict_queue: Queue receiving ClassificationVerdict messages
        config: Configuration dictionary containing audio and classifier sections
        model_path: Absolute path to the Silero VAD ONNX model file
        verbose: Enable detailed logging for debugging (default: False)
    """

    def __init__(self,
                 verdict_queue: queue.Queue,
                 config: Dict[str, Any],
                 model_path: Path,
                 verbose: bool = False):
        self.verdict_queue: queue.Queue = verdict_queue
        self.model_path: Path = model_path
        self.verbose: bool = verbose

        classifier_config = config['classifier']
        self.sample_rate: int = config['audio']['sample_rate']
        self.threshold: float = classifier_config['threshold']
        self.window_frames: int = classifier_config.get('window_frames', 3)
        self.speech_label: str = classifier_config.get('speech_label', 'speech')
        self.silence_label: str = classifier_config.get('silence_label', 'silence')

        if self.sample_rate not in MODEL_WINDOW_SIZES:
            raise ValueError(
                f"Silero VAD supports sample rates {sorted(MODEL_WINDOW_SIZES)}, got {self.sample_rate}"
            )
        self.model_window: int = MODEL_WINDOW_SIZES[self.sample_rate]

        self.model: Optional[onnxruntime.InferenceSession] = None
        self.model_state: Optional[np.ndarray] = None
        self._load_model()

        self._analysis_queue: queue.Queue = queue.Queue(maxsize=classifier_config.get('queue_size', 100))
        self._recent: Deque[Tuple[float, float, float]] = deque(maxlen=self.window_frames)
        self.is_running: bool = False
        self.thread: threading.Thread | None = None

        self.analyzed_frames: int = 0
        self.failed_frames: int = 0
        self.dropped_frames: int = 0
        self.verdicts: int = 0


    def _load_model(self) -> None:
        """Load Silero VAD ONNX model from local path."""
        model_path = self.model_path

        if not model_path.exists():
            raise FileNotFoundError(
                f"Silero VAD model not found at {model_path}. "
                f"Run 'python download_model.py' to download it."
            )

        try:
            sess_options = onnxruntime.SessionOptions()
            sess_options.graph_optimization_level = onnxruntime.GraphOptimizationLevel.ORT_ENABLE_ALL
            sess_options.intra_op_num_threads = 1  # Single thread for small model
            sess_options.inter_op_num_threads = 1

            self.model = onnxruntime.InferenceSession(
                str(model_path),
                sess_options=sess_options,
                providers=['CPUExecutionProvider']
            )
        except Exception as e:
            raise RuntimeError(f"Failed to load Silero VAD ONNX model: {e}") from e

        # Model state (2, batch_size, 128), batch_size = 1 for a single stream
        self.model_state = np.zeros((2, 1, 128), dtype=np.float32)
        self.sr_input = np.array([self.sample_rate], dtype=np.int64)


    def reset_state(self) -> None:
        """Clear the model's temporal context and the analysis window."""
        self.model_state = np.zeros((2, 1, 128), dtype=np.float32)
        self._recent.clear()


    def start(self) -> None:
        """Start the analysis thread."""
        self.reset_state()
        self.is_running = True
        self.thread = threading.Thread(target=self.process, daemon=True)
        self.thread.start()


    def stop(self) -> None:
        """Stop the analysis thread; frames still queued are not analyzed."""
        self.is_running = False
        if self.thread:
            self.thread.join(timeout=2.0)
            self.thread = None
        logging.info(
            f"SileroSpeechClassifier: analysis completed "
            f"(frames={self.analyzed_frames}, verdicts={self.verdicts}, "
            f"failed={self.failed_frames}, dropped={self.dropped_frames})"
        )


    def submit(self, frame: AudioFrame) -> None:
        """Queue a frame for analysis without blocking the caller."""
        try:
            self._analysis_queue.put_nowait(frame)
        except queue.Full:
            self.dropped_frames += 1
            if self.verbose:
                logging.warning(
                    f"SileroSpeechClassifier: analysis queue full, dropped frame "
                    f"(total drops: {self.dropped_frames})"
                )


    def process(self) -> None:
        """Main loop: analysis queue → verdict_queue"""
        while self.is_running:
            try:
                frame = self._analysis_queue.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                verdict = self.analyze(frame)
                if verdict is not None:
                    self._put_verdict_nonblocking(verdict)
            finally:
                self._analysis_queue.task_done()


    def pending(self) -> int:
        """Frames submitted but not answered yet (queued or being analyzed)."""
        return self._analysis_queue.unfinished_tasks


    def analyze(self, frame: AudioFrame) -> Optional[ClassificationVerdict]:
        """Classify one frame in the context of the preceding frames.

        Args:
            frame: Frame to analyze

        Returns:
            Verdict covering the analysis window, or None when inference failed
        """
        try:
            probability = self._frame_probability(frame.samples)
        except Exception as e:
            self.failed_frames += 1
            logging.error(f"SileroSpeechClassifier: analysis failed for frame at {frame.media_time:.3f}s: {e}")
            return None

        self.analyzed_frames += 1
        self._recent.append((frame.media_time, frame.end_media_time, probability))

        start = self._recent[0][0]
        end = self._recent[-1][1]
        confidence = float(np.mean([p for _, _, p in self._recent]))
        label = self.speech_label if confidence > self.threshold else self.silence_label

        if self.verbose:
            logging.debug(
                f"SileroSpeechClassifier: [{start:.3f}, {end:.3f}) {label} "
                f"confidence={confidence:.2f} (frame={probability:.2f})"
            )
        return ClassificationVerdict(
            interval=TimeInterval.from_bounds(start, end),
            confidence=confidence,
            label=label
        )


    def _frame_probability(self, samples: np.ndarray) -> float:
        """Run the model over every window of a frame and return the peak probability."""
        audio = np.asarray(samples, dtype=np.float32)
        remainder = len(audio) % self.model_window
        if remainder or len(audio) == 0:
            audio = np.pad(audio, (0, self.model_window - remainder))

        peak = 0.0
        for offset in range(0, len(audio), self.model_window):
            window = audio[offset:offset + self.model_window].reshape(1, -1)
            ort_outputs = self.model.run(
                None,
                {
                    'input': window,
                    'state': self.model_state,
                    'sr': self.sr_input
                }
            )
            peak = max(peak, float(ort_outputs[0][0][0]))  # Shape: [1, 1]
            self.model_state = ort_outputs[1]
        return peak


    def _put_verdict_nonblocking(self, verdict: ClassificationVerdict) -> None:
        """Enqueue verdict with drop-on-full behavior."""
        try:
            self.verdict_queue.put_nowait(verdict)
            self.verdicts += 1
        except queue.Full:
            logging.warning("SileroSpeechClassifier: verdict queue full, dropped verdict")
