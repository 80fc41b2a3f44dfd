"""Exception taxonomy shared by the jarforge build pipeline."""

from dataclasses import dataclass


class BuildError(Exception):
    """Base class for fatal build failures.

    Every stage raises its own subclass; callers map any of them to a
    non-zero process exit status via ``exit_code``.
    """

    exit_code = 1


@dataclass(frozen=True)
class ConfigurationWarning:
    """A recoverable problem noticed during a build.

    The build proceeds; the warning is logged and kept on the BuildContext
    so callers can report it afterwards.
    """

    category: str
    message: str

    def __str__(self) -> str:
        return f"[{self.category}] {self.message}"
