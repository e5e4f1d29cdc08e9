"""Transport that stores every finalized speech segment as a WAV file."""

import logging
from pathlib import Path
from typing import Optional

import soundfile as sf

from speechseg.sound.Pcm16Converter import Pcm16Converter
from speechseg.types import RawFrame, RecorderStatus, SpeechSegment


class SegmentFileWriter:
    """Writes speech segments as 16-bit mono WAV files.

    Implements SpeechSegmentSubscriber. File names carry a running index and
    the segment's media-time bounds in milliseconds, e.g.
    ``segment_0003_001280-002560.wav``, so a directory listing reads as a
    timeline of the session.

    Raw frames are ignored; status changes are logged.

    Args:
        output_dir: Directory receiving the WAV files (created if missing)
        verbose: Enable verbose logging
    """

    def __init__(self, output_dir: Path, verbose: bool = False) -> None:
        self.output_dir: Path = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.verbose: bool = verbose
        self.segments_written: int = 0
        self.last_file: Optional[Path] = None

    def on_speech_segment(self, segment: SpeechSegment) -> None:
        start_ms = segment.sample_time * 1000 // segment.sample_rate
        end_ms = segment.end_sample_time * 1000 // segment.sample_rate
        path = self.output_dir / f"segment_{self.segments_written:04d}_{start_ms:06d}-{end_ms:06d}.wav"

        samples = Pcm16Converter.to_samples(segment.data)
        sf.write(str(path), samples, segment.sample_rate, subtype='PCM_16')
        self.segments_written += 1
        self.last_file = path

        if self.verbose:
            logging.debug(
                f"SegmentFileWriter: wrote {path.name} "
                f"({segment.frame_count} frames, {len(segment.data)} bytes)"
            )

    def on_raw_frame(self, frame: RawFrame) -> None:
        pass

    def on_status(self, status: RecorderStatus) -> None:
        logging.info(f"SegmentFileWriter: recorder {status.value}, {self.segments_written} segments written")
