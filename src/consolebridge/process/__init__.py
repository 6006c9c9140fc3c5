"""Child process handles.

``ProcessHandle`` is the interface the session layer depends on;
``SubprocessHandle`` is the asyncio-backed implementation used in
production.
"""

from consolebridge.process.base import ProcessHandle
from consolebridge.process.subprocess_backend import SubprocessHandle

__all__ = ["ProcessHandle", "SubprocessHandle"]
