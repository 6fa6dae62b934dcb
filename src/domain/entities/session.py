"""Identity and admin session value objects."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Identity:
    """The identity a dashboard session runs under."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    is_anonymous: bool = False


@dataclass(frozen=True, slots=True)
class AdminSession:
    """One dashboard session: an identity plus the fixed session-start instant.

    Live query handlers receive this object explicitly; records whose own
    event time is not after ``started_at`` never become notifications.
    """

    identity: Identity
    started_at: datetime
