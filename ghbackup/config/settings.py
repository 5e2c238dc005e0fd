from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.constants import API_BASE, CLONE_WORKERS, DEFAULT_DEST, MAX_PAGES, MAX_PER_PAGE, PER_PAGE, RUN_TIMEOUT_SEC
from ..core.errors import ConfigError
from ..core.types import BackupConfig

# Load .env once, early
load_dotenv()


class Settings(BaseSettings):
    """Application config (env or .env)."""

    model_config = SettingsConfigDict(env_prefix="", env_file=None, extra="ignore")

    org: str | None = None
    github_token: str | None = None
    dest: str = Field(default=DEFAULT_DEST)
    clone_workers: int = Field(default=CLONE_WORKERS)
    per_page: int = Field(default=PER_PAGE)
    max_pages: int = Field(default=MAX_PAGES)
    timeout_sec: float = Field(default=RUN_TIMEOUT_SEC)
    api_base: str = Field(default=API_BASE)


def get_settings() -> Settings:
    return Settings()


def build_config(
    settings: Settings,
    *,
    org: str | None = None,
    token: str | None = None,
    dest: str | None = None,
    workers: int | None = None,
    max_pages: int | None = None,
    timeout_sec: float | None = None,
    only_globs: tuple[str, ...] = (),
    exclude_globs: tuple[str, ...] = (),
    keep_dir: bool = False,
) -> BackupConfig:
    """Merge CLI overrides over settings into one frozen BackupConfig."""
    _org = org or settings.org
    if not _org:
        raise ConfigError("ORG env expected (or pass --org)")
    _token = token or settings.github_token
    if not _token:
        raise ConfigError("GITHUB_TOKEN env expected (or pass --token)")

    cfg = BackupConfig(
        org=_org,
        token=_token,
        dest=dest or settings.dest,
        workers=workers if workers is not None else settings.clone_workers,
        per_page=settings.per_page,
        max_pages=max_pages if max_pages is not None else settings.max_pages,
        timeout_sec=timeout_sec if timeout_sec is not None else settings.timeout_sec,
        api_base=settings.api_base,
        only_globs=only_globs,
        exclude_globs=exclude_globs,
        keep_dir=keep_dir,
    )
    for name in ("workers", "per_page", "max_pages", "timeout_sec"):
        if getattr(cfg, name) < 1:
            raise ConfigError(f"{name} must be >= 1, got {getattr(cfg, name)}")
    if cfg.per_page > MAX_PER_PAGE:
        raise ConfigError(f"per_page must be <= {MAX_PER_PAGE}, got {cfg.per_page}")
    return cfg
