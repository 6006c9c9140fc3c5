"""Domain models and errors shared across consolebridge modules."""
