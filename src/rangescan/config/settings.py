"""Typed settings assembled from the configuration sources."""

from dataclasses import dataclass
from pathlib import Path

from .getters import get_bool, get_config, get_float, get_int

DEFAULT_HEALTH_PORT = 10001
DEFAULT_UPDATE_INTERVAL = 12 * 60 * 60.0
DEFAULT_CHECKPOINT_BACKEND = "file"


@dataclass(frozen=True)
class NotifierSettings:
    """Brevo API endpoint plus sender and recipient identities."""

    url: str
    api_key: str
    sender_email: str = ""
    to_email: str = ""
    sender_name: str = "Port Scanner Bot"
    to_name: str = "Admin"


def load_notifier_settings(env_dir: Path | None = None) -> NotifierSettings | None:
    """Return notifier settings, or None when BREVO_URL/BREVO_APIKEY are unset."""
    url = get_config("BREVO_URL", env_dir=env_dir)
    api_key = get_config("BREVO_APIKEY", env_dir=env_dir)
    if not url or not api_key:
        return None
    return NotifierSettings(
        url=str(url),
        api_key=str(api_key),
        sender_email=str(get_config("SENDER_EMAIL", "", env_dir)),
        to_email=str(get_config("TO_EMAIL", "", env_dir)),
        sender_name=str(get_config("SENDER_NAME", "Port Scanner Bot", env_dir)),
        to_name=str(get_config("TO_NAME", "Admin", env_dir)),
    )


def get_health_port(env_dir: Path | None = None) -> int:
    """Port of the health endpoint."""
    return get_int("PORT", DEFAULT_HEALTH_PORT, env_dir)


def get_update_interval(env_dir: Path | None = None) -> float:
    """Seconds between liveness notifications."""
    return get_float("RANGESCAN_UPDATE_INTERVAL", DEFAULT_UPDATE_INTERVAL, env_dir)


def get_checkpoint_backend(env_dir: Path | None = None) -> str:
    """Configured checkpoint backend name ("file" or "memory")."""
    return str(get_config("RANGESCAN_CHECKPOINT_BACKEND", DEFAULT_CHECKPOINT_BACKEND, env_dir))


def is_verbose(env_dir: Path | None = None) -> bool:
    return get_bool("RANGESCAN_VERBOSE", False, env_dir)
