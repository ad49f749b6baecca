import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

from .models import ServiceConfig

logger = logging.getLogger("Murmur.Config")

DEFAULT_CONFIG_FILENAME = "config.yaml"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "MURMUR_FFMPEG": ("transcoder", "executable"),
    "MURMUR_ENGINE_PATH": ("engine", "executable_path"),
    "MURMUR_MODEL_PATH": ("engine", "model_path"),
    "MURMUR_ENGINE_TIMEOUT": ("engine", "timeout_seconds"),
    "MURMUR_WORK_DIR": ("paths", "work"),
}

def load_yaml(path: Path) -> Dict[str, Any]:
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
        return data
    return {}

def _merge_dicts(base: Dict, update: Dict):
    """Recursively merge update dict into base dict."""
    for k, v in update.items():
        if isinstance(v, dict) and k in base and isinstance(base[k], dict):
            _merge_dicts(base[k], v)
        else:
            base[k] = v

def resolve_config_path(config_path: Optional[str] = None) -> Optional[Path]:
    """Search order: explicit path -> current dir -> user home."""
    if config_path:
        return Path(config_path)

    cwd_config = Path(DEFAULT_CONFIG_FILENAME)
    home_config = Path.home() / ".config" / "murmur" / DEFAULT_CONFIG_FILENAME

    if cwd_config.exists():
        return cwd_config
    if home_config.exists():
        return home_config
    return None

def apply_env_overrides(config: Dict[str, Any]) -> None:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            # `engine: null` in YAML leaves a None section
            if not isinstance(config.get(section), dict):
                config[section] = {}
            config[section][key] = value

def load_config(config_path: Optional[str] = None) -> ServiceConfig:
    """Load configuration from file and env vars.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
        yaml.YAMLError: If the config file is not valid YAML.
        pydantic.ValidationError: If the merged values are invalid.
    """
    load_dotenv()

    user_config_path = resolve_config_path(config_path)
    if config_path and not user_config_path.exists():
        raise FileNotFoundError(f"Config file not found: {user_config_path}")

    user_config: Dict[str, Any] = {}
    if user_config_path is not None:
        logger.debug(f"Loading config from {user_config_path}")
        _merge_dicts(user_config, load_yaml(user_config_path))

    # Empty sections fall back to their defaults
    user_config = {k: v for k, v in user_config.items() if v is not None}
    apply_env_overrides(user_config)

    return ServiceConfig(**user_config)
