"""
Settings: environment-driven configuration.

Values come from the process environment, optionally seeded from a .env file
at the project root:

  CHARTBOARD_LOG_LEVEL     = INFO
  CHARTBOARD_CHART_HEIGHT  = 460
  CHARTBOARD_MAX_ROWS      = 50000
  CHARTBOARD_DATA_DIR      = ./data
  CHARTBOARD_FORCE_SEED    = 42
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_DATA_DIR = os.path.join(_PROJECT_ROOT, "data")


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    chart_height: int = 460
    max_rows: int = 50_000
    data_dir: str = DEFAULT_DATA_DIR
    force_seed: int = 42


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        log_level=os.environ.get("CHARTBOARD_LOG_LEVEL", "INFO"),
        chart_height=_int_env("CHARTBOARD_CHART_HEIGHT", 460),
        max_rows=_int_env("CHARTBOARD_MAX_ROWS", 50_000),
        data_dir=os.environ.get("CHARTBOARD_DATA_DIR", DEFAULT_DATA_DIR),
        force_seed=_int_env("CHARTBOARD_FORCE_SEED", 42),
    )
