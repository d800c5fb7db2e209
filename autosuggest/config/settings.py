"""
Central configuration for the Autosuggest service.

Every tunable of the engine, the vocabulary source and the HTTP glue
lives here as a frozen dataclass. Components take their slice of the
settings as an optional constructor argument so tests can pass their own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _project_root() -> Path:
    """Walk up from this file to the directory holding pyproject.toml."""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    return Path(__file__).resolve().parent.parent.parent


@dataclass(frozen=True)
class QuerySettings:
    """Settings for the query processor."""

    # Limit used when the caller does not pass one
    default_limit: int = 10

    # Larger requested limits are clamped to this
    max_limit: int = 50

    # Normalized queries longer than this are truncated before lookup
    max_query_length: int = 100

    # Per-request deadline in seconds (None = no deadline)
    default_timeout: Optional[float] = None

    # "Did you mean" pass when the prefix lookup finds nothing
    fuzzy_enabled: bool = True

    # Maximum prefix edit distance accepted by the fuzzy pass
    max_fuzzy_distance: int = 1

    # Upper bound on terms collected by the fuzzy pass
    fuzzy_scan_limit: int = 500


@dataclass(frozen=True)
class RankingSettings:
    """Scoring weights: score = popularity * match factor."""

    prefix_match_factor: float = 1.0
    fuzzy_match_factor: float = 0.5


@dataclass(frozen=True)
class CacheSettings:
    """Settings for the query result cache."""

    # 0 disables caching entirely
    capacity: int = 1024

    # Entries older than this are treated as misses (seconds)
    ttl_seconds: float = 60.0


@dataclass(frozen=True)
class VocabularySettings:
    """Where the vocabulary comes from and how often it is reloaded."""

    # Seed file loaded at startup (absolute, or relative to data_dir)
    seed_file: Optional[str] = None

    # Seconds between refresh checks; 0 disables the refresher
    refresh_interval: float = 0.0

    # Name of the snapshot written by the CLI build command
    snapshot_name: str = "vocabulary.msgpack"


@dataclass(frozen=True)
class ApiSettings:
    """Settings for the HTTP glue."""

    title: str = "Autosuggest API"
    version: str = "0.1.0"
    host: str = "127.0.0.1"
    port: int = 5000
    cors_origins: tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class LoggingSettings:
    """Settings for log output."""

    level: str = "INFO"
    log_file: str = "autosuggest.log"
    max_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5


@dataclass
class Settings:
    """
    Top-level settings container.

    Usage:
        settings = get_settings()
        print(settings.query.default_limit)
        print(settings.cache.ttl_seconds)
    """

    project_root: Path = field(default_factory=_project_root)
    query: QuerySettings = field(default_factory=QuerySettings)
    ranking: RankingSettings = field(default_factory=RankingSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    vocabulary: VocabularySettings = field(default_factory=VocabularySettings)
    api: ApiSettings = field(default_factory=ApiSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def data_dir(self) -> Path:
        """Root directory for runtime data (snapshots, logs)."""
        return self.project_root / "data"

    @property
    def snapshots_dir(self) -> Path:
        """Directory for vocabulary snapshots."""
        return self.data_dir / "vocabulary"

    @property
    def logs_dir(self) -> Path:
        """Directory for log files."""
        return self.data_dir / "logs"

    @property
    def seed_path(self) -> Optional[Path]:
        """Resolved seed file path, or None when no seed is configured."""
        if not self.vocabulary.seed_file:
            return None
        path = Path(self.vocabulary.seed_file)
        return path if path.is_absolute() else self.data_dir / path

    def ensure_dirs(self) -> None:
        """Create the data directories if they don't exist."""
        self.snapshots_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


def vocabulary_from_env() -> VocabularySettings:
    """
    Vocabulary settings with SEED_FILE and REFRESH_INTERVAL applied.

    Unset or empty variables keep the defaults.
    """
    defaults = VocabularySettings()
    seed_file = os.environ.get("SEED_FILE") or defaults.seed_file
    raw_interval = os.environ.get("REFRESH_INTERVAL", "").strip()
    refresh_interval = defaults.refresh_interval
    if raw_interval:
        try:
            refresh_interval = float(raw_interval)
        except ValueError:
            raise ValueError(f"REFRESH_INTERVAL must be a number of seconds, got {raw_interval!r}") from None
        if refresh_interval < 0:
            raise ValueError(f"REFRESH_INTERVAL must not be negative, got {raw_interval!r}")
    return VocabularySettings(
        seed_file=seed_file,
        refresh_interval=refresh_interval,
        snapshot_name=defaults.snapshot_name,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the shared Settings instance.

    Call this instead of constructing Settings() directly so the whole
    process sees one config object. The vocabulary section is read from
    the environment (see ``vocabulary_from_env``).
    """
    settings = Settings(vocabulary=vocabulary_from_env())
    settings.ensure_dirs()
    return settings
