import os

from bhavan_booking.exceptions import ImproperlyConfigured


def get_env(var_name: str, default=None, required: bool = False):
    value = os.environ.get(var_name, default)
    if required and value in (None, ""):
        raise ImproperlyConfigured(f"Missing required environment variable: {var_name}")
    return value


def get_env_bool(var_name: str, default: str = "False") -> bool:
    return str(get_env(var_name, default)).lower() in ("1", "true", "yes")


def get_env_float(var_name: str, default: float) -> float:
    value = get_env(var_name, None)
    if value in (None, ""):
        return default
    try:
        return float(value)
    except ValueError:
        raise ImproperlyConfigured(f"{var_name} must be a number, got {value!r}")
