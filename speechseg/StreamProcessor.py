# speechseg/StreamProcessor.py
"""
Tests for this module:
- tests/test_stream_processor.py - Message dispatch, ordering, stop semantics
"""
from __future__ import annotations
import queue
import threading
import logging
from typing import Dict, Any, TYPE_CHECKING
from speechseg.types import CapturedAudio, ClassificationVerdict, ProcessorMessage
from speechseg.sound.FrameEnvelopeAnalyzer import FrameEnvelopeAnalyzer

if TYPE_CHECKING:
    from speechseg.protocols import SpeechClassifier
    from speechseg.sound.SegmentationEngine import SegmentationEngine


class StreamProcessor:
    """Single consumer that serializes capture and classifier events.

    Both producers write to one input queue: capture sources put CapturedAudio,
    the classifier puts ClassificationVerdict. Only this thread touches the
    SegmentationEngine, so the frame window and pending span never need locks.

    Per captured buffer:
    1. Analyze loudness → AudioFrame
    2. engine.on_frame_captured(frame) (append + memory valves)
    3. Publish the frame raw if it is non-empty and raw publishing is enabled
    4. Submit the frame to the classifier

    Stop discards the partial pending span and releases all buffered frames.

    Args:
        input_queue: Queue of CapturedAudio and ClassificationVerdict messages
        engine: SegmentationEngine (called synchronously)
        analyzer: FrameEnvelopeAnalyzer used to tag buffers
        classifier: SpeechClassifier receiving every appended frame
        config: Configuration dictionary (reads output.publish_raw_frames)
        verbose: Enable verbose logging
    """

    def __init__(self,
                 input_queue: queue.Queue,
                 engine: SegmentationEngine,
                 analyzer: FrameEnvelopeAnalyzer,
                 classifier: SpeechClassifier | None,
                 config: Dict[str, Any],
                 verbose: bool = False):

        self.input_queue: queue.Queue = input_queue    # INPUT: audio + verdicts
        self.engine: SegmentationEngine = engine       # Called synchronously
        self.analyzer: FrameEnvelopeAnalyzer = analyzer
        self.classifier: SpeechClassifier | None = classifier

        self.publish_raw_frames: bool = config.get('output', {}).get('publish_raw_frames', False)

        self.frames_processed: int = 0
        self.verdicts_processed: int = 0

        self.is_running: bool = False
        self.thread: threading.Thread | None = None
        self.verbose: bool = verbose

    def start(self) -> None:
        """Start processing thread"""
        self.is_running = True
        self.thread = threading.Thread(target=self.process, daemon=True)
        self.thread.start()

    def stop(self) -> None:
        """Stop processing thread and discard the pending span (no flush)."""
        self.is_running = False
        if self.thread:
            self.thread.join(timeout=2.0)
            self.thread = None
        self.engine.reset()
        logging.info(
            f"StreamProcessor: stopped after {self.frames_processed} frames, "
            f"{self.verdicts_processed} verdicts"
        )

    def process(self) -> None:
        """Main loop: read input_queue → engine"""
        while self.is_running:
            try:
                message = self.input_queue.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                self.handle(message)
            finally:
                # unfinished_tasks stays raised until the message is fully handled
                self.input_queue.task_done()

    def handle(self, message: ProcessorMessage) -> None:
        """Dispatch one queue message to the engine."""
        match message:
            case CapturedAudio():
                self._process_audio(message)
            case ClassificationVerdict():
                self.verdicts_processed += 1
                self.engine.on_verdict(message)
            case _:
                logging.warning(f"StreamProcessor: ignoring unknown message {type(message).__name__}")

    def _process_audio(self, captured: CapturedAudio) -> None:
        frame = self.analyzer.analyze(
            captured.samples,
            sample_time=captured.sample_time,
            sample_rate=captured.sample_rate,
            recorded_time=captured.recorded_time
        )
        self.frames_processed += 1

        # Frame must be in the window before any verdict about it can arrive
        self.engine.on_frame_captured(frame)

        if self.publish_raw_frames and not frame.is_empty:
            self.engine.emitter.publish_raw(frame)

        if self.classifier is not None:
            self.classifier.submit(frame)

        if self.verbose and self.frames_processed % 100 == 0:
            logging.debug(
                f"StreamProcessor: {self.frames_processed} frames, window={len(self.engine.window)}, "
                f"state={self.engine.state.name}"
            )
