from __future__ import annotations
from dataclasses import dataclass

DEFAULT_SSW_BASE_URL = "https://ssw.inf.br/api"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


@dataclass(frozen=True)
class EnvCfg:
    """Settings resolved by get_app_env()."""
    SSW_BASE_URL: str = DEFAULT_SSW_BASE_URL
    SSW_TIMEOUT: int = 30
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = DEFAULT_GEMINI_MODEL
