# download_model.py
"""Download the Silero VAD model used by the speech classifier.

The model is stored at models/silero_vad/silero_vad.onnx, where
SegmentationPipeline looks for it by default.
"""

import shutil
import sys
from pathlib import Path

from huggingface_hub import hf_hub_download

REPO_ID = "onnx-community/silero-vad"
REPO_FILENAME = "onnx/model.onnx"


def download_silero_vad(models_dir: Path = Path("./models")) -> Path:
    """Download Silero VAD ONNX model from HuggingFace.

    Args:
        models_dir: Root models directory

    Returns:
        Path of the downloaded model
    """
    print("\n=== Downloading Silero VAD model ===")

    target_dir = models_dir / "silero_vad"
    model_path = target_dir / "silero_vad.onnx"
    target_dir.mkdir(parents=True, exist_ok=True)

    if model_path.exists():
        print(f"Model already exists at {model_path}")
        print(f"Size: {model_path.stat().st_size / 1024:.1f} KB")
        return model_path

    print(f"Downloading from HuggingFace: {REPO_ID}")
    print(f"Saving to: {model_path}")

    try:
        downloaded_path = hf_hub_download(
            repo_id=REPO_ID,
            filename=REPO_FILENAME,
            cache_dir=target_dir
        )
        shutil.copy(downloaded_path, model_path)

        print("Download complete!")
        print(f"Size: {model_path.stat().st_size / 1024:.1f} KB")
    except Exception as e:
        print(f"Download failed: {e}")
        if model_path.exists():
            model_path.unlink()  # Clean up partial download
        raise

    return model_path


if __name__ == "__main__":
    models_dir = Path("./models")
    for arg in sys.argv[1:]:
        if arg.startswith("--models-dir="):
            models_dir = Path(arg.split("=", 1)[1])

    download_silero_vad(models_dir)
