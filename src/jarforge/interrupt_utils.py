"""KeyboardInterrupt handling for the build stages.

An interrupt inside a stage is reported as that stage's BuildError,
chained from the KeyboardInterrupt, after the stage's unfinished output
is removed. Previous artifacts are never touched.
"""

import logging
from pathlib import Path
from typing import Iterable, NoReturn, Type

from .errors import BuildError


def raise_stage_interrupted(
    ke: KeyboardInterrupt,
    error_cls: Type[BuildError],
    action: str,
    partial_files: Iterable[Path] = (),
) -> NoReturn:
    """Discard partial output and raise ``error_cls`` for an interrupt.

    Usage:
        try:
            write_jar(partial)
        except KeyboardInterrupt as ke:
            raise_stage_interrupted(ke, PackagingError, "packaging", [partial])

    Args:
        ke: The interrupt being handled
        error_cls: Stage error to raise
        action: Short stage description used in the message ("compile")
        partial_files: Unfinished files of this stage to delete

    Raises:
        error_cls: Always, with ``ke`` as its cause
    """
    for path in partial_files:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logging.warning(f"Could not remove partial output {path}: {e}")
    raise error_cls(f"Error during {action}: interrupted") from ke
