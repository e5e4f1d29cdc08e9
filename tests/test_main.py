# tests/test_main.py
from pathlib import Path
from main import parse_args, resolve_paths


class TestMainArguments:

    def test_resolve_paths_relative_to_script(self, tmp_path):
        paths = resolve_paths(tmp_path / "main.py")

        assert paths["CONFIG_DIR"] == tmp_path.resolve() / "config"
        assert paths["MODELS_DIR"] == tmp_path.resolve() / "models"
        assert paths["LOGS_DIR"] == tmp_path.resolve() / "logs"

    def test_defaults(self, tmp_path):
        paths = resolve_paths(tmp_path / "main.py")

        options = parse_args([], paths)

        assert options["verbose"] is False
        assert options["input_file"] is None
        assert options["output_dir"] is None
        assert options["realtime"] is True
        assert options["config_path"] == str(paths["CONFIG_DIR"] / "segmenter_config.json")
        assert options["models_dir"] == paths["MODELS_DIR"]

    def test_flags(self, tmp_path):
        paths = resolve_paths(tmp_path / "main.py")

        options = parse_args([
            "-v",
            "--input-file=C:/audio/a=b.wav",
            "--output-dir=out",
            "--config=custom.json",
            "--models-dir=/opt/models",
            "--fast",
        ], paths)

        assert options["verbose"] is True
        assert options["input_file"] == "C:/audio/a=b.wav"
        assert options["output_dir"] == "out"
        assert options["config_path"] == "custom.json"
        assert options["models_dir"] == Path("/opt/models")
        assert options["realtime"] is False
