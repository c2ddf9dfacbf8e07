"""
Lending Policy Configuration

Reads lending policy and storage settings from environment variables.

Includes:
- Database URL (LENDING_DATABASE_URL)
- Loan periods per media type (LENDING_LOAN_DAYS_BOOK, LENDING_LOAN_DAYS_CD)
- Default loan period for unknown media types (LENDING_DEFAULT_LOAN_DAYS)
- Reservation hold window (LENDING_RESERVATION_WINDOW_HOURS)
- Password hashing cost (LENDING_BCRYPT_ROUNDS)
- Log directory and level (LENDING_LOG_DIR, LENDING_LOG_LEVEL)
"""
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from constants import MediaType, PolicyDefaults
from exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _read_int(env: Mapping[str, str], key: str, default: int, minimum: int = 0) -> int:
    """
    Read an integer setting from the environment.

    Raises:
        ConfigurationError: If the value is not an integer or below minimum
    """
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default

    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")

    if value < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class LendingPolicy:
    """
    Immutable lending policy.

    Loan periods are a closed mapping from MediaType to days; any media type
    tag outside the mapping gets default_loan_days.
    """

    loan_days: Dict[MediaType, int] = field(default_factory=lambda: {
        MediaType.BOOK: PolicyDefaults.BOOK_LOAN_DAYS,
        MediaType.CD: PolicyDefaults.CD_LOAN_DAYS,
    })
    default_loan_days: int = PolicyDefaults.DEFAULT_LOAN_DAYS
    reservation_window_hours: int = PolicyDefaults.RESERVATION_WINDOW_HOURS

    def loan_period_days(self, media_type: Optional[str]) -> int:
        """Loan period for a media type tag, falling back to the default."""
        known = MediaType.from_tag(media_type)
        if known is None:
            return self.default_loan_days
        return self.loan_days.get(known, self.default_loan_days)


@dataclass(frozen=True)
class LendingSettings:
    """Process-wide settings for storage, hashing and logging."""

    database_url: str
    bcrypt_rounds: int
    log_dir: Path
    log_level: str
    policy: LendingPolicy


def load_settings(env: Optional[Mapping[str, str]] = None) -> LendingSettings:
    """
    Build settings from environment variables.

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        LendingSettings instance

    Raises:
        ConfigurationError: If any value is malformed
    """
    env = os.environ if env is None else env

    policy = LendingPolicy(
        loan_days={
            MediaType.BOOK: _read_int(env, 'LENDING_LOAN_DAYS_BOOK', PolicyDefaults.BOOK_LOAN_DAYS, minimum=1),
            MediaType.CD: _read_int(env, 'LENDING_LOAN_DAYS_CD', PolicyDefaults.CD_LOAN_DAYS, minimum=1),
        },
        default_loan_days=_read_int(env, 'LENDING_DEFAULT_LOAN_DAYS', PolicyDefaults.DEFAULT_LOAN_DAYS, minimum=1),
        reservation_window_hours=_read_int(
            env, 'LENDING_RESERVATION_WINDOW_HOURS', PolicyDefaults.RESERVATION_WINDOW_HOURS, minimum=1
        ),
    )

    # bcrypt refuses cost factors outside 4..31
    rounds = _read_int(env, 'LENDING_BCRYPT_ROUNDS', PolicyDefaults.BCRYPT_ROUNDS, minimum=4)
    if rounds > 31:
        raise ConfigurationError(f"LENDING_BCRYPT_ROUNDS must be <= 31, got {rounds}")

    log_level = env.get('LENDING_LOG_LEVEL', 'INFO').upper()
    if log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        raise ConfigurationError(f"LENDING_LOG_LEVEL is not a valid level: {log_level}")

    default_data_dir = Path.home() / ".media-lending"
    database_url = env.get('LENDING_DATABASE_URL') or f"sqlite:///{default_data_dir / 'lending.db'}"
    log_dir = Path(env.get('LENDING_LOG_DIR') or default_data_dir / "logs")

    return LendingSettings(
        database_url=database_url,
        bcrypt_rounds=rounds,
        log_dir=log_dir,
        log_level=log_level,
        policy=policy,
    )


settings = load_settings()
logger.debug(f"Lending settings loaded (database: {settings.database_url})")
