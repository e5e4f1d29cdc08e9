"""Transport that hands segmentation events to a consumer thread through a queue."""

import logging
import queue


class SegmentQueuePublisher:
    """Puts segments (and optionally raw frames and status) into a bounded queue.

    Implements SpeechSegmentSubscriber for consumers that live on another
    thread, e.g. a recognizer or a network sender. The StreamProcessor thread
    must never block on a slow consumer, so full queues drop the event with
    a warning.

    Args:
        output_queue: Queue receiving SpeechSegment / RawFrame / RecorderStatus items
        forward_raw_frames: Also forward RawFrame events (default: False)
        forward_status: Also forward RecorderStatus events (default: True)
    """

    def __init__(self,
                 output_queue: queue.Queue,
                 forward_raw_frames: bool = False,
                 forward_status: bool = True) -> None:
        self.output_queue: queue.Queue = output_queue
        self.forward_raw_frames: bool = forward_raw_frames
        self.forward_status: bool = forward_status
        self.dropped: int = 0

    def on_speech_segment(self, segment) -> None:
        self._put_nonblocking(segment)

    def on_raw_frame(self, frame) -> None:
        if self.forward_raw_frames:
            self._put_nonblocking(frame)

    def on_status(self, status) -> None:
        if self.forward_status:
            self._put_nonblocking(status)

    def _put_nonblocking(self, item) -> None:
        try:
            self.output_queue.put_nowait(item)
        except queue.Full:
            self.dropped += 1
            logging.warning(
                f"SegmentQueuePublisher: output queue full, dropped {type(item).__name__} "
                f"(total drops: {self.dropped})"
            )
