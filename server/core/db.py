import logging
from typing import Generator
from pathlib import Path
from urllib.parse import urlparse

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from core.config import SERVER_ROOT, AppSettings

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _prepare_sqlite_url(url: str) -> str:
    """Ensure sqlite file path exists and is absolute, fallback to server data/ if permission denied."""
    if not url.startswith("sqlite") or _is_memory_sqlite(url):
        return url

    parsed = urlparse(url)
    path = parsed.path

    # sqlite:///./data/portal.db -> path "/./data/portal.db"; sqlite:////abs/portal.db -> "//abs/portal.db"
    if path.startswith("//"):
        file_path = Path(path[1:])
    else:
        file_path = Path(path.lstrip("/"))

    # relative paths resolve against the server folder
    if not file_path.is_absolute():
        if file_path.parts and file_path.parts[0] == ".":
            file_path = Path(*file_path.parts[1:])
        file_path = SERVER_ROOT / file_path

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
    except (PermissionError, OSError):
        # Read-only or permission-denied: fallback to server data directory
        fallback = SERVER_ROOT / "data" / file_path.name
        fallback.parent.mkdir(parents=True, exist_ok=True)
        file_path = fallback

    return f"sqlite:///{file_path}"


def build_engine(url: str):
    """Create an engine for url with the SQLite specifics the request threads need."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False, future=True)
    # sessions are opened in one worker thread and queried from another
    connect_args = {"check_same_thread": False}
    if _is_memory_sqlite(url):
        return create_engine(
            url, echo=False, future=True, connect_args=connect_args, poolclass=StaticPool
        )
    return create_engine(_prepare_sqlite_url(url), echo=False, future=True, connect_args=connect_args)


settings = AppSettings()
engine = build_engine(settings.database_url)


def init_db(bind=None) -> None:
    """Create tables if they do not exist."""
    # register every table on the metadata before create_all
    import core.models  # noqa: F401

    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    logger.info(f"Database initialized: {str(bind.url).split('?')[0]}")


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
