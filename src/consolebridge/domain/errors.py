"""Exception hierarchy for consolebridge.

None of these is fatal to the server: each is caught at the session
boundary and turned into an ``error`` notification for the one client
that caused it.
"""

from __future__ import annotations


class ConsoleBridgeError(Exception):
    """Base class for all consolebridge errors."""


class ProtocolError(ConsoleBridgeError):
    """Raised when an inbound payload cannot be parsed into a message."""


class UnknownProjectError(ConsoleBridgeError):
    """Raised when a project id is not present in the registry."""

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Unknown project: {project_id}")
        self.project_id = project_id


class ProcessError(ConsoleBridgeError):
    """Raised when a process handle is used incorrectly."""


class ProcessSpawnError(ProcessError):
    """Raised when the OS refuses to start a child process."""
