import io
import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import yaml

from murmur.cli import build_parser, main, validate_input
from murmur.core.models import ServiceConfig

from fakes import FakeRunner, write_engine_artifact, write_ffmpeg_output


class TestValidateInput(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.config = ServiceConfig(max_upload_bytes=16)

    def tearDown(self):
        self.tmp.cleanup()

    def test_accepts_audio(self):
        path = self.root / "clip.MP3"
        path.write_bytes(b"ID3")
        self.assertIsNone(validate_input(path, self.config))

    def test_missing_file(self):
        self.assertIn("not found", validate_input(self.root / "gone.wav", self.config))

    def test_unsupported_extension(self):
        path = self.root / "notes.pdf"
        path.write_bytes(b"%PDF")
        self.assertIn("Unsupported file format", validate_input(path, self.config))

    def test_too_large(self):
        path = self.root / "long.wav"
        path.write_bytes(b"0" * 17)
        self.assertIn("too large", validate_input(path, self.config))


class TestMain(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        root = Path(self.tmp.name)
        self.model = root / "model.bin"
        self.config_path = root / "config.yaml"
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump({
                "engine": {"executable_path": str(root / "missing-main"), "model_path": str(self.model)},
                "paths": {"work": str(root / "work"), "logs": str(root / "logs")},
            }, f)

    def tearDown(self):
        self.tmp.cleanup()

    def _run(self, argv):
        with patch.object(sys, "excepthook", sys.excepthook), \
                patch("murmur.core.config.load_dotenv"), \
                patch("sys.stdout", new_callable=io.StringIO) as out:
            code = main(argv)
        return code, out.getvalue()

    def test_parser(self):
        args = build_parser().parse_args(["transcribe", "a.mp3", "b.wav", "-l", "de", "-j", "2"])
        self.assertEqual(args.files, ["a.mp3", "b.wav"])
        self.assertEqual(args.language, "de")
        self.assertEqual(args.jobs, 2)

    def test_status_json(self):
        self.model.write_bytes(b"model")

        code, output = self._run(["--config", str(self.config_path), "status", "--json"])

        status = json.loads(output)
        self.assertEqual(code, 1)
        self.assertFalse(status["engine_installed"])
        self.assertTrue(status["model_downloaded"])
        self.assertIn("step2", status["setup_instructions"])

    def test_transcribe_rejects_invalid_files(self):
        code, output = self._run(["--config", str(self.config_path), "transcribe", "--json", "/no/such/file.mp3"])

        entry = json.loads(output)
        self.assertEqual(code, 1)
        self.assertEqual(entry["file"], "/no/such/file.mp3")
        self.assertFalse(entry["success"])
        self.assertIn("File not found", entry["error"])

    def test_malformed_config(self):
        self.config_path.write_text("engine: [unclosed\n", encoding="utf-8")

        code, output = self._run(["--config", str(self.config_path), "status"])

        self.assertEqual(code, 1)
        self.assertIn("Configuration error", output)

    def test_missing_config(self):
        code, _ = self._run(["--config", "/no/such/config.yaml", "status"])
        self.assertEqual(code, 1)


class TestTranscribeCommand(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        root = Path(self.tmp.name)
        self.exe = root / "main"
        self.exe.write_text("#!/bin/sh\n")
        model = root / "model.bin"
        model.write_bytes(b"model")
        self.good = root / "good.mp3"
        self.good.write_bytes(b"ID3")
        self.other = root / "other.wav"
        self.other.write_bytes(b"RIFF")
        self.config_path = root / "config.yaml"
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump({
                "engine": {"executable_path": str(self.exe), "model_path": str(model)},
                "paths": {"work": str(root / "work"), "logs": str(root / "logs")},
            }, f)

        def handler(cmd):
            if cmd[0] == "ffmpeg":
                return write_ffmpeg_output(cmd)
            return write_engine_artifact(cmd, "hi [/there]")

        self.runner = FakeRunner(handler)

    def tearDown(self):
        self.tmp.cleanup()

    def _run(self, *args):
        argv = ["--config", str(self.config_path), "transcribe"] + [str(a) for a in args]
        with patch.object(sys, "excepthook", sys.excepthook), \
                patch("murmur.core.config.load_dotenv"), \
                patch("murmur.pipeline.base.SubprocessRunner", return_value=self.runner), \
                patch("sys.stdout", new_callable=io.StringIO) as out:
            code = main(argv)
        return code, out.getvalue()

    def test_single_file_json(self):
        code, output = self._run("--json", self.good)

        entry = json.loads(output)
        self.assertEqual(code, 0)
        self.assertTrue(entry["success"])
        self.assertEqual(entry["text"], "hi [/there]")
        self.assertEqual(entry["language"], "detected")

    def test_mixed_valid_and_invalid_json(self):
        code, output = self._run("--json", self.good, "/no/such.mp3", self.other)

        entries = json.loads(output)
        self.assertEqual(code, 1)
        self.assertEqual([e["file"] for e in entries], [str(self.good), "/no/such.mp3", str(self.other)])
        self.assertEqual([e["success"] for e in entries], [True, False, True])
        self.assertIn("File not found", entries[1]["error"])
        self.assertEqual(entries[2]["text"], "hi [/there]")

    def test_one_valid_of_two_is_still_a_list(self):
        code, output = self._run("--json", self.good, "/no/such.mp3")

        entries = json.loads(output)
        self.assertIsInstance(entries, list)
        self.assertEqual(len(entries), 2)
        self.assertEqual(code, 1)

    def test_bracketed_transcript_prints_in_console(self):
        code, output = self._run(self.good)

        self.assertEqual(code, 0)
        self.assertIn("hi [/there]", output)


if __name__ == '__main__':
    unittest.main()
