"""Persistence of the authenticated browser session between runs."""

import logging
from pathlib import Path

from pydantic import ValidationError

from ..models import SessionData


logger = logging.getLogger(__name__)


class SessionStore:
    """JSON file holding the last good cookie header and when it was saved.

    Example:
        store = SessionStore(Path("~/.config/chyoa-download/session.json").expanduser())
        cookies = store.load()  # None if missing, expired or unreadable
    """

    def __init__(self, path: Path, max_age_hours: float = 24):
        self.path = path
        self.max_age_seconds = max_age_hours * 60 * 60

    def load(self) -> str | None:
        """Return the saved cookie header if it is younger than the max age.

        Expired or corrupted session files are deleted.
        """
        if not self.path.exists():
            return None

        try:
            data = SessionData.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Failed to load saved session: %s", e)
            self._remove()
            return None

        age = data.age_seconds()
        logger.debug("Session age: %d minutes (max %d)", age // 60, self.max_age_seconds // 60)

        if age < self.max_age_seconds:
            logger.info("Restored saved session from previous run")
            return data.cookies

        logger.info("Saved session expired, will need to re-authenticate")
        self._remove()
        return None

    def save(self, cookies: str) -> None:
        """Save ``cookies`` with the current timestamp; failures are only logged."""
        if not cookies:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(SessionData.now(cookies).model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to save session: %s", e)
            return
        logger.info("Session saved for future use")

    def clear(self) -> bool:
        """Delete the session file.

        Returns:
            True if a session file was removed
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True

    def _remove(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.debug("Could not remove session file %s: %s", self.path, e)
