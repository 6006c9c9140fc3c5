"""consolebridge -- real-time console bridge for project demos.

Clients connect over a WebSocket, pick a project, and drive a backing
process through its standard input and output. Each connection owns at
most one child process, which is torn down when the connection goes
away, when the process exits, or when the server shuts down.
"""

__version__ = "0.1.0"
