# speechseg/SegmenterConfig.py
import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict


@dataclass(frozen=True)
class SegmenterConfig:
    """Thresholds for the segmentation engine.

    All frame counts are in capture frames (one frame per capture tick).

    Attributes:
        silence_threshold: Frames with volume at or below this are empty
        envelope_attack: Envelope follower coefficient for rising samples
        envelope_decay: Envelope follower coefficient for falling samples
        merge_gap: Trimmed gap (in frames) above which a new range starts a new span
        split_gap: Consecutive empty frames that split a flushed span
        split_tail_merge: Trailing sub-ranges with fewer frames merge into the previous one.
            The default 1 never merges: a one-frame trailing utterance such as
            [9, 9] stays on its own and is then skipped as invalid, so its audio
            is lost. 2 merges it instead ([2, 4] + [9, 9] -> [2, 9]), sending the
            pause between them along with it.
        high_water: Window length at which idle leading silence is trimmed
        trim_scan_start: First offset scanned for the idle trim
        trim_scan_end: Last offset (inclusive) scanned for the idle trim
        stale_span: Frames the tail may run past a pending span before it is force-flushed
        min_confidence: Verdicts at or below this confidence are discarded
        speech_label: Classifier label accepted as speech
    """
    silence_threshold: float = 0.02
    envelope_attack: float = 0.16
    envelope_decay: float = 0.003
    merge_gap: int = 2
    split_gap: int = 4
    split_tail_merge: int = 1
    high_water: int = 100
    trim_scan_start: int = 10
    trim_scan_end: int = 50
    stale_span: int = 30
    min_confidence: float = 0.1
    speech_label: str = 'speech'

    def __post_init__(self):
        if self.silence_threshold < 0:
            raise ValueError(f"silence_threshold must be >= 0, got {self.silence_threshold}")
        for name in ('envelope_attack', 'envelope_decay'):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        for name in ('merge_gap', 'split_gap', 'split_tail_merge', 'trim_scan_start', 'stale_span'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.trim_scan_end < self.trim_scan_start:
            raise ValueError(
                f"trim_scan_end ({self.trim_scan_end}) must not precede "
                f"trim_scan_start ({self.trim_scan_start})"
            )
        if self.high_water <= self.trim_scan_start:
            raise ValueError(
                f"high_water ({self.high_water}) must exceed trim_scan_start ({self.trim_scan_start})"
            )

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'SegmenterConfig':
        """Build from the 'segmentation' section of the application config.

        Missing keys fall back to defaults; unknown keys are rejected so
        typos in the JSON file surface at startup.

        Args:
            config: Full configuration dictionary

        Returns:
            SegmenterConfig instance

        Raises:
            ValueError: On unknown keys or out-of-range values
        """
        section = config.get('segmentation', {})
        known = {f.name for f in fields(cls)}
        unknown = set(section) - known
        if unknown:
            raise ValueError(f"Unknown segmentation settings: {sorted(unknown)}")
        return cls(**section)


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from JSON file.

    Args:
        config_path: Path to segmenter_config.json

    Returns:
        Configuration dictionary
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
