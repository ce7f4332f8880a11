import os
from pathlib import Path

from dotenv import load_dotenv

from models.common import parse_bool

# Load environment variables from .env file in the backend folder
backend_dir = Path(__file__).parent
env_path = backend_dir / ".env"
load_dotenv(env_path)

SECRET_KEY = os.getenv("MEDIATOR_SECRET_KEY")
if not SECRET_KEY:  # pragma: no cover
    raise ValueError("MEDIATOR_SECRET_KEY must be set")
TOKEN_ALGORITHM = os.getenv("TOKEN_ALGORITHM", "HS256")
TOKEN_EXPIRE_DAYS = int(os.getenv("TOKEN_EXPIRE_DAYS", "7"))
RESET_TOKEN_EXPIRE_MINUTES = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60"))

API_PREFIX = os.getenv("API_PREFIX", "/api")
BACKEND_DIR = Path(__file__).parent
DATABASE_PATH = BACKEND_DIR / "mediator.sqlite"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_PATH}")
PROJECT_PATH = BACKEND_DIR.parent

TESTING_MODE = parse_bool(os.getenv("TESTING_MODE", False))  # never send emails
HTTPS_VERIFY = parse_bool(os.getenv("HTTPS_VERIFY", True))

BASE_URL = os.getenv("BASE_URL", "http://127.0.0.1:3000")

# --- Metadata providers ---
OMDB_API_KEY = os.getenv("OMDB_API_KEY", "")
OMDB_URL = os.getenv("OMDB_URL", "https://www.omdbapi.com/")
OPEN_LIBRARY_URL = os.getenv("OPEN_LIBRARY_URL", "https://openlibrary.org")
OPEN_LIBRARY_COVERS_URL = os.getenv(
    "OPEN_LIBRARY_COVERS_URL", "https://covers.openlibrary.org"
)
DEEZER_URL = os.getenv("DEEZER_URL", "https://api.deezer.com")
SEARCH_PAGE_SIZE = int(os.getenv("SEARCH_PAGE_SIZE", "10"))

# --- Email / SMTP configuration ---
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_TLS = parse_bool(os.getenv("SMTP_USE_TLS", True))
SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL", "no-reply@mediator.app")
SMTP_FROM_NAME = os.getenv("SMTP_FROM_NAME", "Mediator")
