import os
from dotenv import load_dotenv

from stellar_finance.errors import MissingCredentialError

load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def require_api_key() -> str:
    """Lee la credencial en el momento de usarla; sin ella no arrancamos."""
    key = os.getenv("OPENAI_API_KEY", OPENAI_API_KEY).strip()
    if not key:
        raise MissingCredentialError(
            "OPENAI_API_KEY is not set. Add it to the environment or to a .env file."
        )
    return key
