"""Built-in command vocabulary.

``route`` decides, for one trimmed line of input, which notifications to
send and which side effect the session manager should perform. It never
touches the process itself. Matching is case-insensitive and only
applies to the six built-in words; any other line goes to the running
process if there is one.
"""

from __future__ import annotations

import logging
from typing import Callable

from consolebridge.console.session import Session
from consolebridge.domain.models import OutboundMessage, RouteResult, RouterAction, ServerStats
from consolebridge.projects.registry import ProjectRegistry

logger = logging.getLogger(__name__)

COMMANDS = ("help", "run", "status", "stop", "projects", "info")

HELP_TEXT = (
    "Available commands:\n"
    "- run: Start the application\n"
    "- help: Show this help message\n"
    "- status: Show server and process status\n"
    "- stop: Stop the running process\n"
    "- projects: List available projects\n"
    "- info: Show project information\n\n"
    "Once application is running, all input goes directly to the program."
)

ALREADY_RUNNING = 'Application is already running. Use "stop" to terminate it first.'
NOTHING_RUNNING = "No process is currently running."
TERMINATED = "Process terminated."


def route(
    command: str,
    project: str,
    session: Session,
    registry: ProjectRegistry,
    stats: Callable[[], ServerStats],
) -> RouteResult:
    """Interpret one line of input for ``session``.

    Args:
        command: The trimmed input line.
        project: Project the command applies to (payload override,
            session project, or ``"default"``).
        session: The session the line came from. Only read.
        registry: Registered projects.
        stats: Called for ``status`` only.
    """
    keyword = command.lower()
    logger.debug("[%s] Routing %r (project=%s)", session.connection_id, command, project)

    if keyword == "help":
        return _reply(HELP_TEXT)

    if keyword == "run":
        if session.has_process:
            return _reply(ALREADY_RUNNING)
        if project not in registry:
            return RouteResult(messages=(OutboundMessage.error(f"Unknown project: {project}"),))
        return RouteResult(
            messages=(OutboundMessage.output(f"Starting {project} application..."),),
            action=RouterAction.SPAWN,
            project=project,
        )

    if keyword == "status":
        return _reply(_format_status(session, stats()))

    if keyword == "stop":
        if not session.has_process:
            return _reply(NOTHING_RUNNING)
        return RouteResult(
            messages=(OutboundMessage.output(TERMINATED),),
            action=RouterAction.TERMINATE,
        )

    if keyword == "projects":
        return _reply(_format_catalog(registry))

    if keyword == "info":
        return _reply(_format_info(project, registry))

    if session.has_process:
        return RouteResult(action=RouterAction.FORWARD, text=command)

    return _reply(
        f"Command not recognized: {command}\n"
        'Type "help" for available commands or "run" to start the application.'
    )


def _reply(content: str) -> RouteResult:
    return RouteResult(messages=(OutboundMessage.output(content),))


def _format_status(session: Session, stats: ServerStats) -> str:
    handle = session.process
    lines = [
        "Server Status:",
        "- Server: running",
        f"- Active connections: {stats.connections}",
        f"- Current project: {session.project or 'none'}",
        f"- Process: {'running' if handle is not None else 'stopped'}",
    ]
    if handle is not None:
        lines.append(f"- Process uptime: {int(handle.uptime)}s")
    lines.append(f"- Uptime: {int(stats.uptime_seconds)}s")
    lines.append(f"- Memory: {round(stats.memory_mb)}MB")
    return "\n".join(lines)


def _format_catalog(registry: ProjectRegistry) -> str:
    entries = "".join(f"- {d.id}: {d.description}\n" for d in registry.catalog())
    return (
        "Available projects:\n"
        f"{entries}\n"
        'Use "init" command with project name to set active project.'
    )


def _format_info(project: str, registry: ProjectRegistry) -> str:
    descriptor = registry.describe(project)
    return (
        f"Project: {project}\n"
        f"Description: {descriptor.description}\n"
        f"Technologies: {', '.join(descriptor.tech)}\n"
        f"Repository: {descriptor.repository_url}"
    )
