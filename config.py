# config.py
# Engine configuration, loaded once at startup and passed explicitly

from pathlib import Path
from typing import Optional
import platform
import os

from dotenv import load_dotenv
from pydantic import BaseModel


def get_app_data_dir() -> Path:
    """
    Get cross-platform app data directory.
    Windows: %APPDATA%\\stepstream
    macOS: ~/Library/Application Support/stepstream
    Linux: ~/.local/share/stepstream
    """

    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif system == "Darwin":  # macOS
        base = Path.home() / "Library" / "Application Support"
    else:  # Linux and others
        base = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))

    return base / "stepstream"


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class EngineConfig(BaseModel):
    """Everything the planner, resolver and controller need from the environment."""

    planner_api_key: Optional[str] = None
    planner_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"  # using gemini
    planner_model: str = "gemini-2.5-flash"

    vlm_api_key: Optional[str] = None
    vlm_base_url: str = "https://api.qwen.ai/v1"
    vlm_model: str = "qwen-vl-max"

    # Stored plans live next to the project so they can be corrected by hand
    cache_dir: Path = Path(".cache")
    app_data_dir: Path = get_app_data_dir()

    use_cache: bool = True
    stop_on_error: bool = True
    step_delay_ms: int = 0
    headless: bool = False

    @property
    def log_dir(self) -> Path:
        return self.app_data_dir / "logs"

    @property
    def screenshot_dir(self) -> Path:
        return self.app_data_dir / "screenshots"

    def ensure_directories(self):
        """Create the log and screenshot directories if they are missing."""
        for directory in [self.app_data_dir, self.log_dir, self.screenshot_dir]:
            directory.mkdir(parents=True, exist_ok=True)


def load_config(env_file: Optional[str] = None, **overrides) -> EngineConfig:
    """
    Build an EngineConfig from environment variables.

    Args:
        env_file: Optional dotenv file; the default search (.env) is used when None
        overrides: Field values that win over the environment (e.g. from CLI flags)
    """
    load_dotenv(env_file)

    values = {
        "planner_api_key": os.environ.get("PLANNER_API_KEY") or os.environ.get("OPENAI_API_KEY"),
        "vlm_api_key": os.environ.get("VLM_API_KEY"),
        "use_cache": _env_bool("STEPSTREAM_USE_CACHE", True),
        "stop_on_error": _env_bool("STEPSTREAM_STOP_ON_ERROR", True),
    }
    for field, env_name in [
        ("planner_base_url", "PLANNER_BASE_URL"),
        ("planner_model", "PLANNER_MODEL"),
        ("vlm_base_url", "VLM_BASE_URL"),
        ("vlm_model", "VLM_MODEL"),
        ("step_delay_ms", "STEPSTREAM_STEP_DELAY_MS"),
    ]:
        if os.environ.get(env_name):
            values[field] = os.environ[env_name]

    if os.environ.get("STEPSTREAM_CACHE_DIR"):
        values["cache_dir"] = Path(os.environ["STEPSTREAM_CACHE_DIR"]).expanduser()
    if os.environ.get("STEPSTREAM_HOME"):
        values["app_data_dir"] = Path(os.environ["STEPSTREAM_HOME"]).expanduser()

    values.update({k: v for k, v in overrides.items() if v is not None})
    return EngineConfig(**values)
