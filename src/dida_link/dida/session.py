"""Dida365 session holder."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dida_link.settings_store import ConfigStore

logger = logging.getLogger(__name__)


class Session:
    """Holds credentials and the current token with an injected save callback."""

    def __init__(
        self,
        username: str,
        password: str,
        token: str = "",
        save: "Callable[[Session], Awaitable[None]] | None" = None,
    ) -> None:
        """Initialize session.

        Args:
            username: Email or phone number
            password: Account password
            token: Bearer token, empty until first sign-on
            save: Async callable persisting the session, awaited by persist()
        """
        self.username = username
        self.password = password
        self.token = token
        self._save = save

    async def persist(self) -> None:
        """Durably save token and credentials."""
        if self._save is None:
            return
        await self._save(self)

    @classmethod
    async def from_store(cls, store: "ConfigStore") -> "Session":
        """Create session from stored settings; persist writes back to the store."""
        settings = await asyncio.to_thread(store.load)

        def write(session: "Session") -> None:
            current = store.load()
            store.save(
                current.model_copy(
                    update={
                        "username": session.username,
                        "password": session.password,
                        "token": session.token,
                    }
                )
            )

        async def save(session: "Session") -> None:
            await asyncio.to_thread(write, session)
            logger.debug("[Session] Token persisted")

        return cls(settings.username, settings.password, settings.token, save=save)
