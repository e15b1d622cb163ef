"""Required reviewer resolution."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from src.context import DEFAULT_REVIEWERS_PATH
from src.logging_config import get_logger

logger = get_logger(__name__)


class RequiredReviewerResolver(Protocol):
    """Protocol for sources that name the reviewer whose approval is required."""

    def resolve(self) -> str | None:
        """Return the required reviewer login, or None when none is configured."""


class ReviewersFileResolver:
    """Read a single reviewer login from a plain-text REVIEWERS file.

    The whole trimmed file content is one login. Per-path ownership rules are not
    parsed; a CODEOWNERS-style resolver can replace this class behind the same
    protocol.
    """

    def __init__(self, path: Path | str = DEFAULT_REVIEWERS_PATH) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def resolve(self) -> str | None:
        try:
            reviewer = self._path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as error:
            logger.warning("Could not read reviewers file", path=str(self._path), error=str(error))
            return None
        return reviewer or None
