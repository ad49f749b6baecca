"""Constants used throughout the Murmur application."""

# Normalized audio format expected by whisper.cpp
DEFAULT_SAMPLE_RATE = 16000
DEFAULT_CHANNELS = 1
DEFAULT_AUDIO_CODEC = "pcm_s16le"
NORMALIZED_EXTENSION = ".wav"

# Engine conventions
ARTIFACT_EXTENSION = ".txt"
AUTO_LANGUAGE = "auto"
DETECTED_LANGUAGE = "detected"
ENGINE_DEFAULT_LANGUAGE = "en"
ENGINE_BANNER = "whisper.cpp"

# Tracked temp file roles
ROLE_UPLOADED = "uploaded"
ROLE_NORMALIZED = "normalized"
ROLE_ARTIFACT = "artifact"

# Upload limits
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
SUPPORTED_EXTENSIONS = {
    ".mp3", ".wav", ".ogg", ".oga", ".opus", ".m4a", ".aac", ".flac", ".webm", ".mp4",
}

# Setup instructions reported by the status command
SETUP_INSTRUCTIONS = {
    "step1": "git clone https://github.com/ggerganov/whisper.cpp.git",
    "step2": "cd whisper.cpp && make",
    "step3": "bash ./models/download-ggml-model.sh base.en",
    "step4": "Copy ggml-base.en.bin to models/ directory",
}
