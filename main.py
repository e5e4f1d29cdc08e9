# main.py
import sys
import logging
from pathlib import Path
from typing import Dict, List, Any

from speechseg.LoggingSetup import setup_logging


def resolve_paths(script_path: Path) -> Dict[str, Path]:
    """
    Resolves application paths relative to the project directory.

        project/
        ├── main.py
        ├── speechseg/
        ├── config/        # CONFIG_DIR
        ├── models/        # MODELS_DIR
        └── logs/          # LOGS_DIR

    Args:
        script_path: Path to main script

    Returns:
        Dictionary with resolved paths
    """
    project_dir = script_path.resolve().parent
    return {
        "APP_DIR": project_dir,
        "MODELS_DIR": project_dir / "models",
        "CONFIG_DIR": project_dir / "config",
        "LOGS_DIR": project_dir / "logs",
    }


def parse_args(argv: List[str], paths: Dict[str, Path]) -> Dict[str, Any]:
    """
    Parses command-line flags.

    Supported flags:
        -v                    verbose (DEBUG) logging
        --input-file=PATH     segment an audio file instead of the microphone
        --output-dir=PATH     write segments as WAV files into PATH
        --config=PATH         configuration file (default: config/segmenter_config.json)
        --models-dir=PATH     directory holding silero_vad/silero_vad.onnx
        --fast                feed file input as fast as possible (no real-time pacing)

    Args:
        argv: Arguments without the program name
        paths: Resolved paths from resolve_paths()

    Returns:
        Dictionary of options
    """
    options: Dict[str, Any] = {
        "verbose": "-v" in argv,
        "input_file": None,
        "output_dir": None,
        "config_path": str(paths["CONFIG_DIR"] / "segmenter_config.json"),
        "models_dir": paths["MODELS_DIR"],
        "realtime": "--fast" not in argv,
    }

    for arg in argv:
        if arg.startswith("--input-file="):
            options["input_file"] = arg.split("=", 1)[1]
        elif arg.startswith("--output-dir="):
            options["output_dir"] = arg.split("=", 1)[1]
        elif arg.startswith("--config="):
            options["config_path"] = arg.split("=", 1)[1]
        elif arg.startswith("--models-dir="):
            options["models_dir"] = Path(arg.split("=", 1)[1])

    return options


if __name__ == "__main__":
    PATHS = resolve_paths(Path(__file__))
    options = parse_args(sys.argv[1:], PATHS)

    is_frozen = getattr(sys, 'frozen', False)
    setup_logging(PATHS["LOGS_DIR"], verbose=options["verbose"], is_frozen=is_frozen)

    try:
        from speechseg.pipeline import SegmentationPipeline

        pipeline = SegmentationPipeline(
            config_path=options["config_path"],
            models_dir=options["models_dir"],
            input_file=options["input_file"],
            output_dir=options["output_dir"],
            realtime=options["realtime"],
            verbose=options["verbose"]
        )
        pipeline.run()

    except KeyboardInterrupt:
        logging.info("Interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"ERROR: {type(e).__name__}: {e}")
        import traceback
        logging.error(traceback.format_exc())
        sys.exit(1)
