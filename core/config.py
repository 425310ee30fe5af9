import os
import logging
from dotenv import load_dotenv

# Load .env from project root
try:
    load_dotenv(dotenv_path=os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".env")))
except Exception:
    load_dotenv()

# Environment
APP_NAME = os.getenv("APP_NAME", "Earlybird")

_default_origins = ",".join([
    "http://localhost:3000",
    "http://127.0.0.1:3000",
])
ALLOWED_ORIGINS = [o.strip() for o in (os.getenv("ALLOWED_ORIGINS") or os.getenv("FRONTEND_ORIGIN") or _default_origins).split(",") if o.strip()]

SUBMIT_EMAIL_PATH = (os.getenv("SUBMIT_EMAIL_PATH", "/api/submit-email") or "/api/submit-email").strip()
if not SUBMIT_EMAIL_PATH.startswith("/"):
    SUBMIT_EMAIL_PATH = "/" + SUBMIT_EMAIL_PATH

# Absolute endpoint used by the capture form when no client base_url is configured
SUBMIT_EMAIL_URL = (os.getenv("SUBMIT_EMAIL_URL") or ("http://localhost:8000" + SUBMIT_EMAIL_PATH)).strip()

# Analytics (PostHog capture API)
POSTHOG_KEY = (os.getenv("POSTHOG_KEY") or os.getenv("NEXT_PUBLIC_POSTHOG_KEY") or "").strip()
POSTHOG_HOST = (os.getenv("POSTHOG_HOST") or os.getenv("NEXT_PUBLIC_POSTHOG_HOST") or "").strip().rstrip("/")

# Email capture form: seconds before success/error falls back to idle
SIGNUP_RESET_DELAY_SEC = float(os.getenv("SIGNUP_RESET_DELAY_SEC", "5"))

# Logging
LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").strip().upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger("earlybird")
