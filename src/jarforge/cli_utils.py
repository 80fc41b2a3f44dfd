"""CLI utility functions for jarforge.

This module provides common utilities used by the CLI including:
- Parsing of repeatable KEY=VALUE style options
- Validation of source file arguments
- Error handling and formatting
"""

import sys
from pathlib import Path
from typing import Dict, List, Sequence

from .source import ResourceFile


class OptionParser:
    """Parses the repeatable ``-D`` and ``--resource`` options."""

    @staticmethod
    def parse_properties(values: Sequence[str]) -> Dict[str, str]:
        """Parse ``key=value`` strings; a bare ``key`` maps to "true".

        Raises:
            ValueError: If a key is empty
        """
        properties: Dict[str, str] = {}
        for value in values:
            key, sep, val = value.partition("=")
            if not key:
                raise ValueError(f"Invalid property {value!r}, expected key=value")
            properties[key] = val if sep else "true"
        return properties

    @staticmethod
    def parse_resources(values: Sequence[str]) -> List[ResourceFile]:
        """Parse ``target=source`` or ``source`` resource arguments.

        Without a target the file lands at the jar root under its own name.
        """
        resources: List[ResourceFile] = []
        for value in values:
            target, sep, source = value.partition("=")
            if not sep:
                source_path = Path(value)
                resources.append(ResourceFile(source_path, source_path.name))
            else:
                resources.append(ResourceFile(Path(source), target.strip("/")))
        return resources


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Build failed")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print(f"{ErrorFormatter.YELLOW}! {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class PathValidator:
    """Validates source file arguments."""

    @staticmethod
    def validate_sources(sources: Sequence[Path]) -> None:
        """Exit with status 2 unless every source is an existing file."""
        for source in sources:
            if not source.exists():
                print(f"{ErrorFormatter.RED}✗ Error: Source does not exist: {source}{ErrorFormatter.RESET}")
                sys.exit(2)
            if not source.is_file():
                print(f"{ErrorFormatter.RED}✗ Error: Source is not a file: {source}{ErrorFormatter.RESET}")
                sys.exit(2)
