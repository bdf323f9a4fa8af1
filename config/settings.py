"""Application settings and configuration."""
import os
from pathlib import Path
from typing import Optional, Tuple
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parent / '.env'
load_dotenv(dotenv_path=ENV_PATH)


class Settings:
    """
    Process-wide configuration for the health checks.

    The allowlist is the only thing standing between a query string and an
    outbound socket, so everything here is read once and never mutated.
    """

    # ── Identity provider ─────────────────────────────────────────────────
    # Its hostname is the one dynamic entry of the probe allowlist.
    AUTH_ENDPOINT: Optional[str] = os.getenv('AUTH_ENDPOINT', '') or None

    # ── Probe targets ─────────────────────────────────────────────────────
    HEALTH_STATIC_HOSTS: Tuple[str, ...] = ('www.google.com', 'redcap.univ-lehavre.fr')
    HEALTH_ALLOWED_PORT: int = 443
    REDCAP_HOST:         str = 'redcap.univ-lehavre.fr'
    INTERNET_HOST:       str = 'www.google.com'

    # ── Paths ──────────────────────────────────────────────────────────────
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    DATA_DIR: Path = BASE_DIR / 'data'
    LOG_DIR:  Path = Path(os.getenv('LOG_DIR', str(DATA_DIR / 'logs')))

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def create_directories(cls) -> None:
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
