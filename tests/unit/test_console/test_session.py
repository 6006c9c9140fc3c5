"""Tests for per-connection Session state."""

from __future__ import annotations

import pytest

from consolebridge.console.session import Session
from consolebridge.domain.errors import ProcessError
from consolebridge.domain.models import OutboundMessage


class TestSessionOwnership:
    def test_new_session_is_empty(self) -> None:
        session = Session("1-aa", lambda m: None)
        assert session.project is None
        assert session.process is None
        assert not session.has_process
        assert not session.is_closed

    def test_attach_at_most_one(self, spawner) -> None:
        session = Session("1-aa", lambda m: None)
        session.attach(spawner())
        with pytest.raises(ProcessError, match="already owns"):
            session.attach(spawner())

    def test_detach_ignores_stale_handle(self, spawner) -> None:
        session = Session("1-aa", lambda m: None)
        old, new = spawner(), spawner()
        session.attach(old)
        assert session.detach(old) is True
        session.attach(new)
        assert session.detach(old) is False
        assert session.process is new

    def test_close_signals_process(self, spawner) -> None:
        session = Session("1-aa", lambda m: None)
        handle = spawner()
        session.attach(handle)
        assert session.close() is handle
        assert handle.signals == ["SIGTERM"]
        assert session.is_closed

    def test_close_without_process(self) -> None:
        session = Session("1-aa", lambda m: None)
        assert session.close() is None


class TestSessionMessages:
    def test_helpers_build_typed_messages(self) -> None:
        sent: list[OutboundMessage] = []
        session = Session("1-aa", sent.append)
        session.system("hi")
        session.output("out")
        session.error("bad")
        assert [(m.type, m.content) for m in sent] == [
            ("system", "hi"),
            ("output", "out"),
            ("error", "bad"),
        ]

    def test_closed_session_drops_messages(self) -> None:
        sent: list[OutboundMessage] = []
        session = Session("1-aa", sent.append)
        session.close()
        session.output("too late")
        assert sent == []

    def test_sink_failure_is_contained(self) -> None:
        def broken(message: OutboundMessage) -> None:
            raise RuntimeError("queue gone")

        session = Session("1-aa", broken)
        session.output("still fine")
