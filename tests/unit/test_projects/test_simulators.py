"""Tests for the bundled project simulators."""

from __future__ import annotations

import io
import random

import pytest

from consolebridge.projects.simulators import cpu_scheduler, django_app, react_app


def run(main, *lines: str) -> str:
    stdout = io.StringIO()
    main(io.StringIO("".join(f"{line}\n" for line in lines)), stdout)
    return stdout.getvalue()


class TestCpuScheduler:
    def test_header(self) -> None:
        out = run(cpu_scheduler.main)
        assert out.startswith("=== CPU Scheduler Simulation ===\n")
        assert "4. Round Robin\n" in out
        assert out.endswith("Enter choice (1-4): \n")

    @pytest.mark.parametrize(
        "choice, name", [("1", "FCFS"), ("2", "SJF"), ("3", "Priority"), ("4", "Round Robin")]
    )
    def test_algorithm_choice(self, choice: str, name: str) -> None:
        out = io.StringIO()
        cpu_scheduler.respond(choice, random.Random(0), out)
        assert out.getvalue() == (
            f"Selected: {name}\nEnter number of processes (1-10): \n"
        )

    def test_process_count(self) -> None:
        out = io.StringIO()
        cpu_scheduler.respond("5\n", random.Random(1), out)
        text = out.getvalue()
        assert text.startswith("Creating 5 processes...\nProcess Details:\n")
        assert text.count("Burst=") == 5
        assert "  P5: Burst=" in text
        assert "Scheduling Results:" in text
        assert text.endswith('Simulation complete. Type "run" to start again.\n')

    def test_seeded_results_are_reproducible(self) -> None:
        first, second = io.StringIO(), io.StringIO()
        cpu_scheduler.respond("7", random.Random(42), first)
        cpu_scheduler.respond("7", random.Random(42), second)
        assert first.getvalue() == second.getvalue()

    def test_count_out_of_range(self) -> None:
        out = io.StringIO()
        cpu_scheduler.respond("11", random.Random(0), out)
        assert out.getvalue() == "Please enter a number between 1-10\n"

    def test_invalid_input(self) -> None:
        out = io.StringIO()
        cpu_scheduler.respond("fast please", random.Random(0), out)
        assert out.getvalue().startswith("Invalid input.")

    def test_full_session(self) -> None:
        out = run(cpu_scheduler.main, "1", "3")
        assert "Selected: FCFS" in out
        assert "Creating 3 processes..." in out


class TestReactApp:
    def test_known_commands(self) -> None:
        out = run(react_app.main, "npm start", "npm test")
        assert "=== Custom Project 1 ===" in out
        assert "Server running on http://localhost:3000" in out
        assert "✓ All tests passed" in out

    def test_unknown_command(self) -> None:
        out = run(react_app.main, "yarn dev")
        assert out.endswith("Unknown command. Try: npm start, npm build, npm test\n")


class TestDjangoApp:
    def test_known_commands(self) -> None:
        out = run(django_app.main, "  python manage.py migrate  ")
        assert "Migrations completed successfully!" in out

    def test_unknown_command(self) -> None:
        out = run(django_app.main, "python manage.py shell")
        assert out.endswith(django_app.UNKNOWN + "\n")
