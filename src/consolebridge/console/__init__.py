"""Connection/process lifecycle: sessions, the session manager and the
built-in command router."""

from consolebridge.console.manager import SessionManager
from consolebridge.console.session import Session

__all__ = ["Session", "SessionManager"]
