# tests/test_silero_classifier.py
import queue
import time
import numpy as np
import pytest
from unittest.mock import MagicMock, patch
from speechseg.classifier.SileroSpeechClassifier import SileroSpeechClassifier
from speechseg.types import ClassificationVerdict
from tests.frame_fixture import make_frame


def model_returning(*probabilities):
    """Mock ONNX session returning the given probabilities in order (last one repeats)."""
    session = MagicMock()
    probs = list(probabilities)

    def run(output_names, inputs):
        assert inputs['input'].shape == (1, 512)
        assert inputs['state'].shape == (2, 1, 128)
        assert inputs['sr'].dtype == np.int64
        prob = probs.pop(0) if len(probs) > 1 else probs[0]
        return [np.array([[prob]], dtype=np.float32), np.ones((2, 1, 128), dtype=np.float32)]

    session.run.side_effect = run
    return session


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "silero_vad.onnx"
    path.write_bytes(b"onnx")
    return path


@pytest.fixture
def make_classifier(config, model_file):
    def _make(session, verdict_queue=None):
        with patch('speechseg.classifier.SileroSpeechClassifier.onnxruntime.InferenceSession',
                   return_value=session):
            return SileroSpeechClassifier(
                verdict_queue=verdict_queue if verdict_queue is not None else queue.Queue(),
                config=config,
                model_path=model_file
            )
    return _make


class TestSileroSpeechClassifier:
    """Silero VAD wrapped as an asynchronous interval classifier (ONNX session mocked)."""

    def test_missing_model_raises_with_hint(self, config, tmp_path):
        with pytest.raises(FileNotFoundError, match="download_model.py"):
            SileroSpeechClassifier(queue.Queue(), config, tmp_path / "missing.onnx")

    def test_unsupported_sample_rate(self, config, model_file):
        config['audio']['sample_rate'] = 44100

        with pytest.raises(ValueError):
            SileroSpeechClassifier(queue.Queue(), config, model_file)

    def test_speech_verdict_covers_frame(self, make_classifier):
        classifier = make_classifier(model_returning(0.9))

        verdict = classifier.analyze(make_frame(0, samples_per_frame=512))

        assert isinstance(verdict, ClassificationVerdict)
        assert verdict.label == 'speech'
        assert verdict.confidence == pytest.approx(0.9)
        assert verdict.interval.start == pytest.approx(0.0)
        assert verdict.interval.end == pytest.approx(512 / 16000)

    def test_silence_verdict_below_threshold(self, make_classifier):
        classifier = make_classifier(model_returning(0.2))

        verdict = classifier.analyze(make_frame(0, samples_per_frame=512))

        assert verdict.label == 'silence'

    def test_frame_probability_is_max_over_windows(self, make_classifier):
        session = model_returning(0.1, 0.8)
        classifier = make_classifier(session)

        verdict = classifier.analyze(make_frame(0, samples_per_frame=1024))

        assert session.run.call_count == 2
        assert verdict.confidence == pytest.approx(0.8)

    def test_short_frame_is_padded(self, make_classifier):
        session = model_returning(0.9)
        classifier = make_classifier(session)

        classifier.analyze(make_frame(0, samples_per_frame=160))

        assert session.run.call_count == 1

    def test_state_carries_across_windows(self, make_classifier):
        classifier = make_classifier(model_returning(0.9))

        classifier.analyze(make_frame(0, samples_per_frame=512))

        assert np.all(classifier.model_state == 1.0)

    def test_analysis_window_spans_recent_frames(self, make_classifier):
        classifier = make_classifier(model_returning(0.9, 0.9, 0.0, 0.0))

        verdicts = [classifier.analyze(make_frame(i, samples_per_frame=512)) for i in range(4)]

        # window_frames=3: the 4th verdict starts at frame 1
        assert verdicts[3].interval.start == pytest.approx(512 / 16000)
        assert verdicts[3].interval.end == pytest.approx(4 * 512 / 16000)
        assert verdicts[2].confidence == pytest.approx(0.6)
        assert verdicts[2].label == 'speech'
        assert verdicts[3].confidence == pytest.approx(0.3)
        assert verdicts[3].label == 'silence'

    def test_inference_failure_skips_frame(self, make_classifier):
        session = MagicMock()
        session.run.side_effect = RuntimeError("bad input")
        classifier = make_classifier(session)

        assert classifier.analyze(make_frame(0, samples_per_frame=512)) is None
        assert classifier.failed_frames == 1

    def test_submit_drops_when_queue_full(self, config, model_file):
        config['classifier']['queue_size'] = 1
        with patch('speechseg.classifier.SileroSpeechClassifier.onnxruntime.InferenceSession'):
            classifier = SileroSpeechClassifier(queue.Queue(), config, model_file)

        classifier.submit(make_frame(0))
        classifier.submit(make_frame(1))

        assert classifier.dropped_frames == 1

    def test_thread_delivers_verdicts(self, make_classifier):
        verdict_queue = queue.Queue()
        classifier = make_classifier(model_returning(0.9), verdict_queue=verdict_queue)

        classifier.start()
        try:
            classifier.submit(make_frame(0, samples_per_frame=512))
            verdict = verdict_queue.get(timeout=2.0)
        finally:
            classifier.stop()

        assert verdict.label == 'speech'
        assert classifier.verdicts == 1

    def test_pending_counts_unanswered_frames(self, make_classifier):
        verdict_queue = queue.Queue()
        classifier = make_classifier(model_returning(0.9), verdict_queue=verdict_queue)

        classifier.submit(make_frame(0, samples_per_frame=512))
        classifier.submit(make_frame(1, samples_per_frame=512))
        assert classifier.pending() == 2

        classifier.start()
        try:
            verdict_queue.get(timeout=2.0)
            verdict_queue.get(timeout=2.0)
            deadline = time.time() + 2.0
            while classifier.pending() and time.time() < deadline:
                time.sleep(0.01)
        finally:
            classifier.stop()

        assert classifier.pending() == 0
        assert classifier.verdicts == 2

    def test_pending_released_when_inference_fails(self, make_classifier):
        session = MagicMock()
        session.run.side_effect = RuntimeError("bad input")
        classifier = make_classifier(session)

        classifier.submit(make_frame(0, samples_per_frame=512))
        classifier.start()
        try:
            deadline = time.time() + 2.0
            while classifier.pending() and time.time() < deadline:
                time.sleep(0.01)
        finally:
            classifier.stop()

        assert classifier.pending() == 0
        assert classifier.failed_frames == 1
