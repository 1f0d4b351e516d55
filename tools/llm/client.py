from functools import lru_cache

from openai import OpenAI

from app.config import AI_REQUEST_TIMEOUT_SECONDS
from infra.env import OPENAI_BASE_URL, require_env


@lru_cache(maxsize=1)
def get_client() -> OpenAI:
    """Build the OpenAI client on first use; retries are ours, not the SDK's"""
    return OpenAI(
        api_key=require_env("OPENAI_API_KEY"),
        base_url=OPENAI_BASE_URL,
        timeout=AI_REQUEST_TIMEOUT_SECONDS,
        max_retries=0
    )
