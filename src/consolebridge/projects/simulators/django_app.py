"""Python/Django project simulation driven by manage.py commands."""

from __future__ import annotations

import sys
from typing import TextIO

RESPONSES = {
    "python manage.py runserver": [
        "Starting Django development server...",
        "Server running on http://127.0.0.1:8000/",
    ],
    "python manage.py migrate": [
        "Running migrations...",
        "Migrations completed successfully!",
    ],
    "python manage.py createsuperuser": [
        "Creating superuser...",
        "Superuser created successfully!",
    ],
}

UNKNOWN = "Unknown command. Try: python manage.py runserver, migrate, createsuperuser"


def main(stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
    print("=== Custom Project 2 ===", file=stdout)
    print("Python/Django Application", file=stdout)
    print("Available commands:", file=stdout)
    print("- python manage.py runserver: Start Django server", file=stdout)
    print("- python manage.py migrate: Run migrations", file=stdout)
    print("- python manage.py createsuperuser: Create admin user", file=stdout)
    print("Enter command: ", file=stdout)
    stdout.flush()
    for line in stdin:
        for reply in RESPONSES.get(line.strip(), [UNKNOWN]):
            print(reply, file=stdout)
        stdout.flush()


if __name__ == "__main__":
    main()
