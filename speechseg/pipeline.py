import queue
import signal
import sys
import time
import logging
from pathlib import Path
from typing import List, Any, Dict, Optional

from .SegmenterConfig import SegmenterConfig, load_config
from .StreamProcessor import StreamProcessor
from .protocols import SpeechClassifier, SpeechSegmentSubscriber
from .types import RecorderStatus
from .sound.FrameEnvelopeAnalyzer import FrameEnvelopeAnalyzer
from .sound.SegmentationEngine import SegmentationEngine
from .output.SegmentFileWriter import SegmentFileWriter


class SegmentationPipeline:
    """Wires capture → StreamProcessor → classifier → transport.

    Threads:
    - Capture: sounddevice callback or FileAudioSource feeder, puts CapturedAudio
    - StreamProcessor: single consumer of input_queue, owns the SegmentationEngine
    - Classifier: analyzes submitted frames, puts ClassificationVerdict into input_queue

    Status events (RecorderStatus) are published to every subscriber:
    INITIALIZED after construction, RECORDING after start(), STOPPED after stop().

    Args:
        config_path: Path to segmenter_config.json
        models_dir: Directory containing silero_vad/silero_vad.onnx
        input_file: Optional audio file to segment instead of the microphone
        output_dir: Directory for WAV segments (overrides output.output_dir)
        subscribers: Additional SpeechSegmentSubscribers
        classifier: Classifier to use instead of SileroSpeechClassifier
        realtime: Pace file input at capture rate
        verbose: Enable verbose logging
    """

    def __init__(self,
                 config_path: str = "./config/segmenter_config.json",
                 models_dir: Optional[Path] = None,
                 input_file: Optional[str] = None,
                 output_dir: Optional[str] = None,
                 subscribers: Optional[List[SpeechSegmentSubscriber]] = None,
                 classifier: Optional[SpeechClassifier] = None,
                 realtime: bool = True,
                 verbose: bool = False) -> None:
        self.config: Dict[str, Any] = load_config(config_path)
        self.segmenter_config: SegmenterConfig = SegmenterConfig.from_dict(self.config)
        self.verbose: bool = verbose
        self._is_stopped: bool = False

        queue_size = self.config['audio'].get('queue_size', 200)
        self.input_queue: queue.Queue = queue.Queue(maxsize=queue_size)  # CapturedAudio + verdicts

        self.subscribers: List[SpeechSegmentSubscriber] = list(subscribers or [])
        output_dir = output_dir or self.config.get('output', {}).get('output_dir')
        if output_dir:
            self.subscribers.append(SegmentFileWriter(Path(output_dir), verbose=verbose))

        self.engine: SegmentationEngine = SegmentationEngine(
            config=self.segmenter_config,
            subscribers=self.subscribers,
            verbose=verbose
        )

        if classifier is None:
            from .classifier.SileroSpeechClassifier import SileroSpeechClassifier

            if models_dir is None:
                models_dir = Path("./models")
            model_path = models_dir / self.config['classifier'].get('model_path', 'silero_vad/silero_vad.onnx')
            classifier = SileroSpeechClassifier(
                verdict_queue=self.input_queue,
                config=self.config,
                model_path=model_path,
                verbose=verbose
            )
        self.classifier: SpeechClassifier = classifier

        self.processor: StreamProcessor = StreamProcessor(
            input_queue=self.input_queue,
            engine=self.engine,
            analyzer=FrameEnvelopeAnalyzer(self.segmenter_config),
            classifier=self.classifier,
            config=self.config,
            verbose=verbose
        )

        # Create audio source - microphone or file
        self.input_file: Optional[str] = input_file
        if input_file:
            from .sound.FileAudioSource import FileAudioSource

            logging.info(f"Using file input: {input_file}")
            # At most half the input queue in flight: verdicts always find a free slot
            max_backlog = max(1, min(queue_size // 2, self.config['classifier'].get('queue_size', 100)))
            self.audio_source = FileAudioSource(
                input_queue=self.input_queue,
                config=self.config,
                file_path=input_file,
                realtime=realtime,
                backlog=self.backlog,
                max_backlog=max_backlog,
                verbose=verbose
            )
        else:
            from .sound.AudioSource import AudioSource

            logging.info("Using microphone input")
            self.audio_source = AudioSource(
                input_queue=self.input_queue,
                config=self.config,
                verbose=verbose
            )

        # Consumers first, producers last
        self.components: List[Any] = [
            self.processor,
            self.classifier,
            self.audio_source
        ]

        self.engine.emitter.publish_status(RecorderStatus.INITIALIZED)

    def start(self) -> None:
        logging.info("Starting segmentation pipeline...")
        for component in self.components:
            component.start()
        self.engine.emitter.publish_status(RecorderStatus.RECORDING)
        logging.info("Pipeline running. Press Ctrl+C to stop.")

    def stop(self) -> None:
        """Stop producers before consumers; the pending span is discarded."""
        if self._is_stopped:
            return
        self._is_stopped = True

        logging.info("Stopping pipeline...")
        for component in reversed(self.components):
            component.stop()
        self.engine.emitter.publish_status(RecorderStatus.STOPPED)
        logging.info("Pipeline stopped.")

    def backlog(self) -> int:
        """Messages still in flight.

        Counts input-queue messages not yet handled by the StreamProcessor
        plus frames the classifier has not answered. A frame moves from one
        to the other before it is released, so it is never missed in between.
        """
        return self.input_queue.unfinished_tasks + self.classifier.pending()

    def wait_for_drain(self, timeout: float = 5.0, settle: float = 0.3) -> bool:
        """Wait until the backlog stays at zero for `settle` seconds.

        Used after file input ends so late verdicts still reach the engine.

        Returns:
            True if everything drained before the timeout
        """
        deadline = time.monotonic() + timeout
        quiet_since: Optional[float] = None
        while time.monotonic() < deadline:
            if self.backlog() == 0:
                if quiet_since is None:
                    quiet_since = time.monotonic()
                elif time.monotonic() - quiet_since >= settle:
                    return True
            else:
                quiet_since = None
            time.sleep(0.05)
        logging.warning(f"Pipeline not drained after {timeout:.1f}s ({self.backlog()} messages in flight)")
        return False

    def run(self) -> None:
        """Run until Ctrl+C, or until file input has been fully processed."""
        def signal_handler(sig: int, frame: Any) -> None:
            self.stop()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        self.start()

        try:
            if self.input_file:
                self.audio_source.finished.wait()
                self.wait_for_drain()
            else:
                while not self._is_stopped:
                    time.sleep(0.2)
        except KeyboardInterrupt:
            logging.info("Interrupted by user.")
        finally:
            self.stop()
