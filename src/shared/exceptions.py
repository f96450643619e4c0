"""
Custom exception hierarchy for the agent servers.

All agent errors inherit from AgentError so they can be caught
uniformly at the tool boundary.
"""


class AgentError(Exception):
    """Base exception for all agent errors."""

    def __init__(self, message: str, agent_name: str = "unknown"):
        self.agent_name = agent_name
        self.message = message
        super().__init__(f"[{agent_name}] {message}")


class FileDependenciesError(AgentError):
    """Errors raised by the File Dependencies Agent."""

    def __init__(self, message: str):
        super().__init__(message, agent_name="file_dependencies")


class ProjectNotFoundError(FileDependenciesError):
    """The project root directory does not exist."""
    pass


class TargetNotFoundError(FileDependenciesError):
    """The requested file could not be resolved inside the project."""
    pass


class UnsupportedFileError(FileDependenciesError):
    """The dependency provider cannot analyse this kind of file."""
    pass
