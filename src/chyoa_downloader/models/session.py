"""Pydantic model for the persisted browser session."""

import time

from pydantic import BaseModel, Field


class SessionData(BaseModel):
    """Cookie header saved after a successful login."""

    cookies: str = Field(..., min_length=1, description="Cookie header, 'name=value; ...'")
    timestamp: int = Field(..., description="Save time in milliseconds since the epoch")

    @classmethod
    def now(cls, cookies: str) -> "SessionData":
        return cls(cookies=cookies, timestamp=int(time.time() * 1000))

    def age_seconds(self, now: float | None = None) -> float:
        current = time.time() if now is None else now
        return current - self.timestamp / 1000
