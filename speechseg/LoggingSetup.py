# speechseg/LoggingSetup.py
import sys
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler

LOG_FILE_NAME = "segmenter.log"
LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'


def setup_logging(logs_dir: Path | None, verbose: bool = False, is_frozen: bool = False) -> Path | None:
    """
    Configure root logging for the segmenter process.

    The capture callback and the processing thread both log, so handlers are
    attached to the root logger only. A rotating file is written when
    logs_dir is given; console output is added unless running frozen
    (no console attached).

    Args:
        logs_dir: Directory to store log files, or None for console-only logging
        verbose: If True, set DEBUG level; otherwise INFO
        is_frozen: If True, skip console handler

    Returns:
        Path of the log file, or None when file logging is disabled
    """
    level = logging.DEBUG if verbose else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    log_file = None
    if logs_dir is not None:
        logs_dir.mkdir(parents=True, exist_ok=True)
        log_file = logs_dir / LOG_FILE_NAME
        # 10MB max, keep 5 files
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if not is_frozen:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # sounddevice/onnxruntime emit RuntimeWarnings from their own threads
    logging.captureWarnings(True)

    logging.info(
        f"Logging initialized: level={logging.getLevelName(level)}, "
        f"frozen={is_frozen}, file={log_file}"
    )
    return log_file
