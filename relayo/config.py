import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./relayo.db")

# Security - no default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Bearer token verification (HS256 JWT issued by the identity provider)
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET") or SECRET_KEY
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE") or None

# Frontend base URL for redirects
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Public URL of this API, used to rebuild webhook URLs for signature checks
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")

# Google OAuth (Calendar + Sheets on one account)
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI", "http://localhost:8000/auth/google/callback")

# Twilio inbound webhook signing secret. Verification is skipped when unset.
TWILIO_WEBHOOK_SECRET = os.getenv("TWILIO_WEBHOOK_SECRET")

# Shared secret for the /sync/run trigger. Open when unset.
CRON_SECRET = os.getenv("CRON_SECRET")

# Sync window around "now"
SYNC_PAST_DAYS = int(os.getenv("SYNC_PAST_DAYS", "7"))
SYNC_FUTURE_DAYS = int(os.getenv("SYNC_FUTURE_DAYS", "30"))

# Flat per-booking price until services carry their own price
AVERAGE_SERVICE_PRICE = float(os.getenv("AVERAGE_SERVICE_PRICE", "50"))

ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")
