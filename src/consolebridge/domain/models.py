"""Core domain models for the consolebridge system.

These models describe the data crossing the system's boundaries: the
JSON messages exchanged with clients, the events a child process
produces, the static metadata of each project, and the status snapshot
reported to clients and health probes.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ProcessState(str, enum.Enum):
    """Lifecycle of a process handle."""

    STARTING = "starting"  # Handle exists, OS process not launched yet
    RUNNING = "running"
    EXITED = "exited"


class ProcessEventKind(str, enum.Enum):
    """Kind of event emitted by a process handle."""

    STDOUT = "stdout"
    STDERR = "stderr"
    ERROR = "error"
    EXIT = "exit"


class RouterAction(str, enum.Enum):
    """Side effect the command router asks the session manager to perform."""

    NONE = "none"
    SPAWN = "spawn"
    TERMINATE = "terminate"
    FORWARD = "forward"


# ---------------------------------------------------------------------------
# Client messages (discriminated union)
# ---------------------------------------------------------------------------


class InitMessage(BaseModel):
    """Selects the project the connection works with."""

    model_config = ConfigDict(frozen=True)

    type: Literal["init"] = "init"
    project: str = Field(description="Project identifier to select")
    content: str | None = Field(default=None)


class InputMessage(BaseModel):
    """A line typed by the user."""

    model_config = ConfigDict(frozen=True)

    type: Literal["input"] = "input"
    content: str = Field(description="Raw line of input")
    project: str | None = Field(
        default=None, description="Overrides the session's project for this command"
    )


InboundMessage = Annotated[
    Union[InitMessage, InputMessage],
    Field(discriminator="type"),
]

inbound_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


class OutboundMessage(BaseModel):
    """A notification sent from the server to one client."""

    model_config = ConfigDict(frozen=True)

    type: Literal["system", "output", "error"]
    content: str

    @classmethod
    def system(cls, content: str) -> OutboundMessage:
        return cls(type="system", content=content)

    @classmethod
    def output(cls, content: str) -> OutboundMessage:
        return cls(type="output", content=content)

    @classmethod
    def error(cls, content: str) -> OutboundMessage:
        return cls(type="error", content=content)


# ---------------------------------------------------------------------------
# Process events
# ---------------------------------------------------------------------------


class ProcessEvent(BaseModel):
    """One item of a process handle's event stream.

    A stream carries any number of ``stdout``/``stderr``/``error`` events
    and ends with exactly one ``exit`` event.
    """

    model_config = ConfigDict(frozen=True)

    kind: ProcessEventKind
    data: str = Field(default="", description="Decoded output text or error message")
    exit_code: int | None = Field(default=None, description="Set on exit events only")


# ---------------------------------------------------------------------------
# Projects and status
# ---------------------------------------------------------------------------


class ProjectDescriptor(BaseModel):
    """Static metadata describing a runnable project."""

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    tech: tuple[str, ...] = Field(default=(), description="Technologies, in display order")
    repository_url: str = ""


class ServerStats(BaseModel):
    """Point-in-time snapshot of the server's load."""

    model_config = ConfigDict(frozen=True)

    connections: int = Field(ge=0)
    uptime_seconds: float = Field(ge=0.0)
    memory_mb: float = Field(ge=0.0, description="Resident memory of the server process")


class RouteResult(BaseModel):
    """What the command router decided for one line of input."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[OutboundMessage, ...] = ()
    action: RouterAction = RouterAction.NONE
    project: str | None = Field(default=None, description="Project to spawn (SPAWN)")
    text: str | None = Field(default=None, description="Raw text to forward (FORWARD)")
