"""React/TypeScript project simulation driven by npm-style commands."""

from __future__ import annotations

import sys
from typing import TextIO

RESPONSES = {
    "npm start": ["Starting development server...", "Server running on http://localhost:3000"],
    "npm build": ["Building for production...", "Build completed successfully!"],
    "npm test": ["Running tests...", "✓ All tests passed"],
}


def main(stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
    print("=== Custom Project 1 ===", file=stdout)
    print("React/TypeScript Application", file=stdout)
    print("Available commands:", file=stdout)
    print("- npm start: Start development server", file=stdout)
    print("- npm build: Build for production", file=stdout)
    print("- npm test: Run tests", file=stdout)
    print("Enter command: ", file=stdout)
    stdout.flush()
    for line in stdin:
        lines = RESPONSES.get(line.strip(), ["Unknown command. Try: npm start, npm build, npm test"])
        for reply in lines:
            print(reply, file=stdout)
        stdout.flush()


if __name__ == "__main__":
    main()
