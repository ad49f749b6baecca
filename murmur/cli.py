import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from .batch import BatchOutcome, BatchTranscriber
from .constants import AUTO_LANGUAGE, SUPPORTED_EXTENSIONS
from .core.config import load_config
from .core.console import console
from .core.models import ServiceConfig, TranscriptionRequest
from .exceptions import EngineNotInstalledError, InputValidationError, ModelNotFoundError, MurmurError
from .pipeline import TranscriptionPipeline

logger = logging.getLogger("Murmur.CLI")

SETUP_ERRORS = (EngineNotInstalledError, ModelNotFoundError)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="murmur", description="Murmur - local speech-to-text with whisper.cpp.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    parser.add_argument("--config", help="Path to config.yaml")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    transcribe_parser = subparsers.add_parser("transcribe", help="Transcribe one or more audio files")
    transcribe_parser.add_argument("files", nargs="+", help="Input audio file(s)")
    transcribe_parser.add_argument("-l", "--language", default=AUTO_LANGUAGE, help="Language code or 'auto' (default: auto)")
    transcribe_parser.add_argument("-j", "--jobs", type=int, help="Number of files to transcribe concurrently")
    transcribe_parser.add_argument("--json", action="store_true", help="Print results as JSON")

    status_parser = subparsers.add_parser("status", help="Show whisper.cpp setup status")
    status_parser.add_argument("--json", action="store_true", help="Print status as JSON")

    return parser

def validate_input(file_path: Path, config: ServiceConfig) -> Optional[str]:
    """Return an error message if file_path cannot be transcribed, else None."""
    if not file_path.is_file():
        return f"File not found: {file_path}"
    if file_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        return f"Unsupported file format: {file_path.suffix}. Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
    size = file_path.stat().st_size
    if size > config.max_upload_bytes:
        return f"File too large: {file_path.name} is {size} bytes (limit {config.max_upload_bytes})"
    return None

def cmd_status(pipeline: TranscriptionPipeline, as_json: bool) -> int:
    status = pipeline.status()
    if as_json:
        print(status.model_dump_json(indent=2))
        return 0 if status.ready else 1

    console.key_value_table({
        "Whisper installed": "yes" if status.engine_installed else "no",
        "Model downloaded": "yes" if status.model_downloaded else "no",
        "Whisper path": status.engine_path,
        "Model path": status.model_path,
    }, title="whisper.cpp status")

    if status.ready:
        console.success("Engine ready.")
        return 0

    console.warning("Engine not ready. Setup instructions:")
    for step, instruction in status.setup_instructions.items():
        console.print(f"  {step}: {instruction}")
    return 1

def _print_outcomes(outcomes: List[BatchOutcome], as_json: bool, as_list: bool = False) -> None:
    if as_json:
        payload = []
        for outcome in outcomes:
            entry = {"file": str(outcome.request.source_audio_path), "success": outcome.ok}
            if outcome.ok:
                entry.update(outcome.result.model_dump(mode="json"))
            else:
                entry["error"] = str(outcome.error)
            payload.append(entry)
        print(json.dumps(payload if as_list else payload[0], indent=2, ensure_ascii=False))
        return

    for outcome in outcomes:
        name = outcome.request.source_audio_path.name
        if outcome.ok:
            console.transcript(outcome.result.text, title=f"{name} ({outcome.result.language})")
        else:
            console.error_panel(str(outcome.error), title=f"{name} failed")
            if isinstance(outcome.error, SETUP_ERRORS):
                console.print("Run 'murmur status' for setup instructions.")

def cmd_transcribe(pipeline: TranscriptionPipeline, config: ServiceConfig, args: argparse.Namespace) -> int:
    """Transcribe args.files; one outcome per given file, in the order given."""
    outcomes: List[Optional[BatchOutcome]] = [None] * len(args.files)
    pending = []
    for index, raw_path in enumerate(args.files):
        file_path = Path(raw_path)
        request = TranscriptionRequest(source_audio_path=file_path, language_hint=args.language)
        error = validate_input(file_path, config)
        if error:
            logger.debug(f"Rejected {file_path}: {error}")
            outcomes[index] = BatchOutcome(request=request, error=InputValidationError(file_path, error))
            continue
        pending.append((index, request))

    if len(pending) == 1:
        index, request = pending[0]
        with console.status(f"Transcribing {request.source_audio_path.name}..."):
            try:
                outcomes[index] = BatchOutcome(request=request, result=pipeline.run(request))
            except MurmurError as e:
                outcomes[index] = BatchOutcome(request=request, error=e)
    elif pending:
        transcriber = BatchTranscriber(pipeline, max_workers=args.jobs)
        with console.status(f"Transcribing {len(pending)} files..."):
            results = transcriber.run([request for _, request in pending])
        for (index, _), outcome in zip(pending, results):
            outcomes[index] = outcome

    _print_outcomes(outcomes, args.json, as_list=len(args.files) > 1)
    return 1 if any(not o.ok for o in outcomes) else 0

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    # Defaults until the config is known
    console.configure(output_mode="standard", debug=args.verbose)
    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.error_panel(str(e), title="Configuration error")
        return 1

    from .utils import setup_logging
    debug_mode = args.verbose or config.debug
    # JSON output must stay machine-readable
    output_mode = "silent" if getattr(args, "json", False) else config.output_mode
    console.configure(output_mode=output_mode, debug=debug_mode and output_mode != "silent")
    setup_logging(log_dir=config.paths.logs, debug=debug_mode, output_mode=output_mode)

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = handle_exception

    pipeline = TranscriptionPipeline(config)

    if args.command == "status":
        return cmd_status(pipeline, args.json)

    if args.command == "transcribe":
        return cmd_transcribe(pipeline, config, args)

    parser.print_help()
    return 0

if __name__ == "__main__":
    sys.exit(main())
