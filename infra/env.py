import os
from typing import Optional

from dotenv import load_dotenv

from app.config import BASE_URL, MODEL_NAME

load_dotenv()


def require_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {key}")
    return value


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    return value if value else default


def has_openai_key() -> bool:
    return bool(os.getenv("OPENAI_API_KEY"))


OPENAI_BASE_URL = get_env("OPENAI_BASE_URL", BASE_URL)
OPENAI_MODEL = get_env("OPENAI_MODEL", MODEL_NAME)
