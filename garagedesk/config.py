from pathlib import Path
import os

from dotenv import load_dotenv

# Load .env from the project root
PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(dotenv_path=ENV_PATH)

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

ADVISOR_MODEL = os.getenv("ADVISOR_MODEL", "gpt-3.5-turbo")
ADVISOR_TEMPERATURE = 0.7
ADVISOR_MAX_TOKENS = 500


def parse_context_limit(raw: str) -> int:
    """
    Max requests kept by the shared advisor. 0 keeps every request until the
    context is cleared. Negative values are a configuration error.
    """
    limit = int(raw)
    if limit < 0:
        raise ValueError(f"ADVISOR_CONTEXT_LIMIT must be >= 0, got {limit}")
    return limit


ADVISOR_CONTEXT_LIMIT = parse_context_limit(os.getenv("ADVISOR_CONTEXT_LIMIT", "0"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
