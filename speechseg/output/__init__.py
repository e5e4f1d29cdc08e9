"""Transports receiving finalized speech segments."""
from speechseg.output.SegmentFileWriter import SegmentFileWriter
from speechseg.output.SegmentQueuePublisher import SegmentQueuePublisher

__all__ = ['SegmentFileWriter', 'SegmentQueuePublisher']
