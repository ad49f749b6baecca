import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml
from pydantic import ValidationError

from murmur.core.config import apply_env_overrides, load_config
from murmur.core.models import TranscriptionRequest


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self.tmp.name) / "config.yaml"

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, data):
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f)

    @patch("murmur.core.config.load_dotenv")
    @patch.dict(os.environ, {}, clear=True)
    def test_yaml_values(self, _):
        self._write({
            "engine": {"executable_path": "/opt/whisper/main", "timeout_seconds": 30},
            "batch": {"max_workers": 4},
        })

        config = load_config(str(self.config_path))

        self.assertEqual(config.engine.executable_path, "/opt/whisper/main")
        self.assertEqual(config.engine.timeout_seconds, 30)
        self.assertEqual(config.engine.model_path, "./models/ggml-base.en.bin")
        self.assertEqual(config.batch.max_workers, 4)
        self.assertEqual(config.transcoder.executable, "ffmpeg")

    @patch("murmur.core.config.load_dotenv")
    def test_env_overrides_yaml(self, _):
        self._write({"engine": {"model_path": "/from/yaml.bin"}})
        env = {"MURMUR_MODEL_PATH": "/from/env.bin", "MURMUR_ENGINE_TIMEOUT": "12.5"}

        with patch.dict(os.environ, env, clear=True):
            config = load_config(str(self.config_path))

        self.assertEqual(config.engine.model_path, "/from/env.bin")
        self.assertEqual(config.engine.timeout_seconds, 12.5)

    @patch("murmur.core.config.load_dotenv")
    def test_missing_explicit_file(self, _):
        with self.assertRaises(FileNotFoundError):
            load_config(str(Path(self.tmp.name) / "nope.yaml"))

    @patch("murmur.core.config.load_dotenv")
    @patch.dict(os.environ, {}, clear=True)
    def test_invalid_values(self, _):
        self._write({"batch": {"max_workers": 0}})

        with self.assertRaises(ValidationError):
            load_config(str(self.config_path))

    @patch("murmur.core.config.load_dotenv")
    @patch.dict(os.environ, {}, clear=True)
    def test_malformed_yaml(self, _):
        self.config_path.write_text("engine: [unclosed\n", encoding="utf-8")

        with self.assertRaises(yaml.YAMLError):
            load_config(str(self.config_path))

    @patch("murmur.core.config.load_dotenv")
    @patch.dict(os.environ, {}, clear=True)
    def test_non_mapping_yaml(self, _):
        self.config_path.write_text("- just\n- a list\n", encoding="utf-8")

        with self.assertRaises(ValueError):
            load_config(str(self.config_path))

    @patch("murmur.core.config.load_dotenv")
    def test_null_section_uses_defaults_and_env(self, _):
        self.config_path.write_text("engine:\ntranscoder: null\n", encoding="utf-8")

        with patch.dict(os.environ, {"MURMUR_ENGINE_PATH": "/opt/whisper/main"}, clear=True):
            config = load_config(str(self.config_path))

        self.assertEqual(config.engine.executable_path, "/opt/whisper/main")
        self.assertEqual(config.engine.model_path, "./models/ggml-base.en.bin")
        self.assertEqual(config.transcoder.executable, "ffmpeg")

    def test_env_override_replaces_null_section(self):
        config = {"engine": None}

        with patch.dict(os.environ, {"MURMUR_MODEL_PATH": "/m.bin"}, clear=True):
            apply_env_overrides(config)

        self.assertEqual(config, {"engine": {"model_path": "/m.bin"}})


class TestTranscriptionRequest(unittest.TestCase):
    def test_language_hint_normalized(self):
        self.assertEqual(TranscriptionRequest(source_audio_path=Path("a.wav"), language_hint=" FR ").language_hint, "fr")
        self.assertEqual(TranscriptionRequest(source_audio_path=Path("a.wav"), language_hint="").language_hint, "auto")
        self.assertEqual(TranscriptionRequest(source_audio_path=Path("a.wav"), language_hint=None).language_hint, "auto")

    def test_request_ids_are_unique(self):
        a = TranscriptionRequest(source_audio_path=Path("a.wav"))
        b = TranscriptionRequest(source_audio_path=Path("a.wav"))
        self.assertNotEqual(a.request_id, b.request_id)


if __name__ == '__main__':
    unittest.main()
