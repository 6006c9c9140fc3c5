"""Stand-in programs run as child processes for the built-in projects.

Each module is a self-contained script driven line by line over stdin.
They are launched by path with the configured Python interpreter.
"""
