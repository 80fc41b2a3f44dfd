"""jarforge - incremental jar builder for single-file Java and Kotlin programs."""

__version__ = "0.1.0"
