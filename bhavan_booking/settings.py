import logging.config
from pathlib import Path

import structlog

# Optionally load .env file if using python-dotenv
from dotenv import load_dotenv

from bhavan_booking.env_helper import get_env, get_env_bool, get_env_float

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")

DEBUG = get_env_bool("BHAVAN_DEBUG", "False")

# Backend
API_BASE_URL = get_env("BHAVAN_API_URL", "http://192.168.29.78:3000/api").rstrip("/")
API_TIMEOUT = get_env_float("BHAVAN_API_TIMEOUT", 10.0)

# Local session store
SESSION_STORE_PATH = Path(
    get_env("BHAVAN_SESSION_PATH", str(Path.home() / ".bhavan_booking" / "session.json"))
).expanduser()
# Fernet key (or any passphrase) used to encrypt the token at rest
SESSION_ENCRYPTION_KEY = get_env("BHAVAN_SESSION_KEY", "")
STORAGE_KEY_PREFIX = "@bhavan_"

# Razorpay checkout
RAZORPAY_KEY_ID = get_env("BHAVAN_RAZORPAY_KEY", "rzp_test_XXXX")
RAZORPAY_CHECKOUT_SCRIPT = "https://checkout.razorpay.com/v1/checkout.js"
VENUE_NAME = get_env("BHAVAN_VENUE_NAME", "Mathur Vaishya Bhavan")
CHECKOUT_THEME_COLOR = "#0D34B7"
PHONE_COUNTRY_CODE = "+91"

LOG_LEVEL = get_env("BHAVAN_LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "structlog.stdlib.ProcessorFormatter",
            "processor": structlog.processors.JSONRenderer(),
            "foreign_pre_chain": [
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
            ],
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "level": LOG_LEVEL,
        }
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "bhavan_booking": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "bhavan_booking.payments": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "urllib3": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}


def configure_logging() -> None:
    logging.config.dictConfig(LOGGING)
