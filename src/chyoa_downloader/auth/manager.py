"""Authentication flow on top of the browser session."""

import logging
from collections.abc import Callable

from ..client.browser import BrowserSession
from ..utils.exceptions import AuthenticationError
from .session import SessionStore


logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]
PauseCallback = Callable[[str], None]


def _never(message: str) -> bool:
    return False


def _noop(message: str) -> None:
    return None


class AuthManager:
    """Gets the browser session logged in, or explains why it is not.

    Cookies come from, in order: an explicit cookie header, the saved
    session, or an interactive login in a visible browser window. Not
    being logged in is never fatal; the site then serves placeholder
    images instead of story images.
    """

    def __init__(
        self,
        store: SessionStore,
        cookie: str | None = None,
        confirm: ConfirmCallback = _never,
        pause: PauseCallback = _noop,
    ):
        """Initialize the manager.

        Args:
            store: Saved-session storage
            cookie: Cookie header given on the command line
            confirm: Asks the user a yes/no question
            pause: Blocks until the user is done with the browser
        """
        self.store = store
        self.cookie = cookie
        self.confirm = confirm
        self.pause = pause

    async def authenticate(self, session: BrowserSession, interactive: bool = True) -> bool:
        """Apply known cookies and fall back to an interactive login.

        Args:
            session: Started browser session
            interactive: Whether the user may be asked to log in

        Returns:
            True if the session ends up authenticated
        """
        cookie = self.cookie or self.store.load()

        if cookie:
            logger.info("Setting up authentication cookies...")
            try:
                await session.apply_cookies(cookie)
            except AuthenticationError as e:
                logger.warning("%s Continuing without authentication.", e)
                return False
            if await session.is_authenticated():
                logger.info("Session is valid")
                return True
            logger.warning("Session is invalid or expired, will need to re-authenticate")
            if not self.cookie:
                self.store.clear()
            question = "Saved session is invalid. Would you like to log in again?"
        else:
            question = (
                "Authentication required for full story access (including images). "
                "Would you like to log in interactively?"
            )

        if not interactive or not self.confirm(question):
            logger.warning("Continuing without authentication - you'll get placeholder images.")
            return False

        try:
            await self.login(session)
        except AuthenticationError as e:
            logger.warning("%s Continuing without authentication.", e)
            return False
        return True

    async def login(self, session: BrowserSession) -> None:
        """Let the user log in through a visible browser window and save the session.

        Raises:
            AuthenticationError: If the site still shows a logged-out page
        """
        await session.restart(headless=False)
        logger.info("Opening browser for login...")
        await session.open_login_page()
        self.pause("Please log in in the browser window, then press Enter here to continue...")

        if not await session.is_authenticated():
            raise AuthenticationError("Authentication failed or not completed.")

        logger.info("Successfully authenticated!")
        self.store.save(await session.cookie_header())
