import os

from dotenv import load_dotenv

# Loads .env from the project root
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bistro.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

# CORS: every origin is allowed unless configured
_cors_env = os.getenv("CORS_ORIGINS", "*")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip()] or ["*"]

# Payments
PAYMENT_PROVIDER = os.getenv("PAYMENT_PROVIDER", "stripe").strip().lower()
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "").strip()
STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY", "").strip()
STRIPE_API_VERSION = os.getenv("STRIPE_API_VERSION", "2023-10-16")
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "usd").strip().lower() or "usd"
REQUIRE_PAYMENT = _env_flag("REQUIRE_PAYMENT")

# Table layout
TABLE_MOVE_MIN_INTERVAL_MS = int(os.getenv("TABLE_MOVE_MIN_INTERVAL_MS", "150"))
