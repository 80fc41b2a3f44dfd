"""Native image pipeline.

Turns the jar into a standalone executable with GraalVM's native-image.
native-image is very chatty, so its standard output goes to a temporary
log file whose location is always printed.
"""

import logging
import platform
import tempfile
from pathlib import Path
from typing import List, Optional

from ..argument_escaper import escape_os_arguments
from ..config.jdk import resolve_in_java_home, search_path
from ..config.settings import BuildSettings
from ..errors import BuildError
from ..source import BuildContext, SourceSet
from .process_runner import run_tool

NATIVE_IMAGE = "native-image"


class NativeBuildError(BuildError):
    """Raised when native-image fails or is interrupted."""
    pass


def image_name(jar_file: Path) -> Path:
    """Native binary path for a jar: ``<jar>.exe`` on Windows, ``<jar>.bin`` elsewhere."""
    suffix = ".exe" if platform.system() == "Windows" else ".bin"
    return Path(str(jar_file) + suffix)


def resolve_native_image(requested_java_version: Optional[str], settings: BuildSettings) -> str:
    """Locate native-image: GRAALVM_HOME/bin first, then the requested JDK."""
    if settings.graalvm_home is not None:
        found = search_path(NATIVE_IMAGE, settings.graalvm_home.absolute() / "bin")
        if found is not None:
            return str(found)
    return resolve_in_java_home(NATIVE_IMAGE, requested_java_version, settings)


class NativeImageBuilder:
    """Runs native-image on a packaged jar."""

    def __init__(self, show_progress: bool = True):
        self.show_progress = show_progress

    def build_command(self, ss: SourceSet, ctx: BuildContext, jar_file: Path) -> List[str]:
        cmd = [resolve_native_image(ctx.get_java_version_or(ss), ctx.settings)]
        cmd.append("-H:+ReportExceptionStackTraces")
        cmd.append("--enable-https")
        class_path = ctx.resolve_class_path(ss)
        if not class_path.is_empty():
            cmd.append(f"--class-path={class_path.class_path}")
        cmd.extend(["-jar", str(jar_file)])
        cmd.append(str(image_name(jar_file)))
        return cmd

    def build_native(self, ss: SourceSet, ctx: BuildContext, jar_file: Path) -> Path:
        """Build the native binary next to ``jar_file``.

        Returns:
            Path of the native binary

        Raises:
            NativeBuildError: If native-image exits non-zero or is interrupted
        """
        cmd = self.build_command(ss, ctx, jar_file)

        fd, log_name = tempfile.mkstemp(prefix="jarforge", suffix="native-image")
        # run_tool reopens the log by name
        with open(fd, "wb"):
            pass
        log_path = Path(log_name)

        logging.debug("native-image: " + " ".join(escape_os_arguments(cmd, ctx.settings.shell)))
        if self.show_progress:
            print(f"log: {log_path}")
        logging.info(f"native-image log: {log_path}")

        run_tool(cmd, NativeBuildError, "native-image", stdout_path=log_path)
        return image_name(jar_file)
