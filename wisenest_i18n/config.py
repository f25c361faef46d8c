import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from wisenest_i18n.logger import get_logger

logger = get_logger(__name__)

# Translation configuration constants
DEFAULT_CHUNK_THRESHOLD = 2000  # Max characters sent to the provider in one request
DEFAULT_SYSTEM_MESSAGE = (
    "You are a professional UI translator. Translate user interface text accurately, "
    "keep it concise and professional. Return only the translation without any explanation."
)

DEFAULT_API_URL = "https://dashscope.aliyuncs.com/api/v1/services/aigc/text-generation/generation"
DEFAULT_MODEL = "qwen-turbo"

# Placeholder written into fresh config files; treated as "no credential"
API_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"

# Environment variables checked for the provider credential, in order
API_KEY_ENV_VARS = ("DASHSCOPE_API_KEY", "ALIBABA_ACCESS_KEY_ID")

# Get base directory (project root)
BASE_DIR = Path(__file__).parent.parent
CONFIG_DIR = BASE_DIR / "config"
CONFIG_FILE = CONFIG_DIR / "config.json"
DEFAULT_DB_FILE = BASE_DIR / "translations.db"

# Default prompts
DEFAULT_PROMPTS = {
    "ui_translation_prompt": {
        "version": "1.0",
        "description": "Single text translation prompt for translate_one",
        "prompt": "Translate the following {source_language_name} UI text into {target_language_name}:\n{text}"
    }
}

# Default configuration template
DEFAULT_CONFIG = {
    "api_key": API_KEY_PLACEHOLDER,
    "api_url": DEFAULT_API_URL,
    "model": DEFAULT_MODEL,
    "temperature": 0.1,
    "top_p": 0.8,
    "timeout": 30,
    "max_retries": 2,
    "retry_max_wait": 10.0,
    "request_deadline": 120.0,
    "chunk_threshold": DEFAULT_CHUNK_THRESHOLD,
    "max_workers": 4,
    "system_message": DEFAULT_SYSTEM_MESSAGE,
    "db_file": str(DEFAULT_DB_FILE),
    "admin_token": "",
    "line_channel_token": "",
    "debounce_seconds": 0.8,
    "catalog_ttl_seconds": 300,
    "catalog_max_retries": 3,
}


@dataclass
class TranslationConfig:
    """Explicit runtime configuration handed to services at construction time."""
    api_key: str = ""
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    temperature: float = 0.1
    top_p: float = 0.8
    timeout: Any = 30
    max_retries: int = 2
    retry_max_wait: float = 10.0
    # Upper bound on one content translation, all chunks included
    request_deadline: float = 120.0
    chunk_threshold: int = DEFAULT_CHUNK_THRESHOLD
    max_workers: int = 4
    system_message: str = DEFAULT_SYSTEM_MESSAGE
    db_file: str = str(DEFAULT_DB_FILE)
    admin_token: str = ""
    line_channel_token: str = ""
    debounce_seconds: float = 0.8
    catalog_ttl_seconds: float = 300
    catalog_max_retries: int = 3
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key) and self.api_key != API_KEY_PLACEHOLDER

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslationConfig":
        known = {f.name for f in fields(cls)} - {"extra"}
        values = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(extra=extra, **values)

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        payload = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        if redact:
            payload["api_key"] = "***" if self.has_credentials else ""
            payload["admin_token"] = "***" if self.admin_token else ""
            payload["line_channel_token"] = "***" if self.line_channel_token else ""
        return payload


def ensure_config_directory():
    """Ensure the config directory exists."""
    CONFIG_DIR.mkdir(exist_ok=True)
    logger.debug(f"Config directory ensured: {CONFIG_DIR}")


def create_default_config():
    """Create the default config.json file."""
    ensure_config_directory()
    with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
        json.dump(DEFAULT_CONFIG, f, indent=4, ensure_ascii=False)
    logger.info(f"Created default config file: {CONFIG_FILE}")


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    if not config_file.exists():
        return {}
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.warning(f"Config file {config_file} does not contain an object, ignoring it")
            return {}
        logger.debug(f"Configuration loaded from {config_file}")
        return data
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config file {config_file}: {e}")
        logger.warning("Using default configuration")
        return {}


def _read_environment(environ) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for name in API_KEY_ENV_VARS:
        value = environ.get(name)
        if value:
            overrides["api_key"] = value
            break
    env_map = {
        "WISENEST_API_URL": "api_url",
        "WISENEST_TRANSLATION_MODEL": "model",
        "WISENEST_DB_FILE": "db_file",
        "WISENEST_ADMIN_TOKEN": "admin_token",
        "LINE_CHANNEL_TOKEN": "line_channel_token",
    }
    for env_name, key in env_map.items():
        value = environ.get(env_name)
        if value:
            overrides[key] = value
    return overrides


def load_config(config_file: Optional[Path] = None, environ=None) -> TranslationConfig:
    """
    Build the configuration object.

    Priority: environment variables > config file > DEFAULT_CONFIG.
    A missing credential is not an error; translation degrades to pass-through.
    """
    environ = os.environ if environ is None else environ
    merged = DEFAULT_CONFIG.copy()
    merged.update(_read_config_file(config_file or CONFIG_FILE))
    merged.update(_read_environment(environ))

    config = TranslationConfig.from_dict(merged)
    if not config.has_credentials:
        logger.warning("Translation API key is not configured; translations will return the original text")
    return config


def load_prompts() -> Dict[str, Any]:
    """Prompts are fixed in the codebase and never loaded from disk."""
    return DEFAULT_PROMPTS.copy()


def get_prompt(prompt_name: str = "ui_translation_prompt") -> Dict[str, Any]:
    """Get a specific prompt by name."""
    prompts = load_prompts()
    return prompts.get(prompt_name, DEFAULT_PROMPTS["ui_translation_prompt"])
