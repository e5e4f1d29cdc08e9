"""Speech classifiers producing delayed verdicts for the segmentation engine."""
from speechseg.classifier.SileroSpeechClassifier import SileroSpeechClassifier

__all__ = ['SileroSpeechClassifier']
