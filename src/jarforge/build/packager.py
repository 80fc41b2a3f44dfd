"""Jar Packager.

This module assembles the compiled classes and the manifest into the final
jar.

Design:
    - Manifest records main class, agent classes, declared attributes,
      runtime options (portable escaping), the build JDK and a fingerprint
      of the resolved class path
    - The jar is written to a temporary sibling and renamed over the
      target, so a failed packaging run leaves any previous jar intact
    - The new jar must read back as an artifact before it replaces the
      previous one
    - Provides clear error messages
"""

import os
import zipfile
from pathlib import Path
from typing import Dict

from ..argument_escaper import escape_arguments
from ..config.jdk import format_build_jdk
from ..errors import BuildError
from ..interrupt_utils import raise_stage_interrupted
from ..source import BuildContext, SourceSet
from ..source.artifact import (
    Artifact,
    ATTR_AGENT_CLASS,
    ATTR_BUILD_JDK,
    ATTR_DEPS_FINGERPRINT,
    ATTR_JAVA_OPTIONS,
    ATTR_MAIN_CLASS,
    ATTR_MANIFEST_VERSION,
    ATTR_PREMAIN_CLASS,
    class_path_fingerprint,
)
from ..source.manifest import MANIFEST_PATH, ManifestError, format_manifest


class PackagingError(BuildError):
    """Raised when jar packaging fails."""
    pass


def build_manifest(ss: SourceSet, ctx: BuildContext) -> Dict[str, str]:
    """Compute the manifest attributes for the jar."""
    attributes: Dict[str, str] = {ATTR_MANIFEST_VERSION: "1.0"}

    main_class = ctx.get_main_class_or(ss)
    if main_class is not None:
        attributes[ATTR_MAIN_CLASS] = main_class

    attributes.update(ss.manifest_attributes)

    if ss.agent_main_class is not None:
        attributes[ATTR_AGENT_CLASS] = ss.agent_main_class
    if ss.premain_class is not None:
        attributes[ATTR_PREMAIN_CLASS] = ss.premain_class

    runtime_options = " ".join(escape_arguments(ss.runtime_options))
    if runtime_options:
        attributes[ATTR_JAVA_OPTIONS] = runtime_options

    if ctx.build_jdk > 0:
        attributes[ATTR_BUILD_JDK] = format_build_jdk(ctx.build_jdk)

    class_path = ctx.resolve_class_path(ss)
    attributes[ATTR_DEPS_FINGERPRINT] = class_path_fingerprint(class_path.class_path)

    return attributes


class Packager:
    """Creates the jar from a compile directory.

    This class handles:
    - Building the manifest
    - Zipping the compile directory
    - Atomically replacing the target jar
    - Showing size information
    """

    def __init__(self, show_progress: bool = True):
        """Initialize packager.

        Args:
            show_progress: Whether to show packaging progress
        """
        self.show_progress = show_progress

    def package(
        self,
        ss: SourceSet,
        ctx: BuildContext,
        compile_dir: Path,
        jar_file: Path
    ) -> Path:
        """Package ``compile_dir`` plus manifest into ``jar_file``.

        Args:
            ss: Source set being built
            ctx: Build context (main class, build JDK)
            compile_dir: Directory holding the compiled output
            jar_file: Jar to create or overwrite

        Returns:
            Path to the jar

        Raises:
            PackagingError: If the jar cannot be written or writing is
                interrupted
        """
        if not compile_dir.is_dir():
            raise PackagingError(f"Compile directory not found: {compile_dir}")

        try:
            manifest = format_manifest(build_manifest(ss, ctx))
        except ManifestError as e:
            raise PackagingError(f"Invalid manifest for {jar_file.name}: {e}") from e
        partial = jar_file.with_name(jar_file.name + ".part")

        try:
            jar_file.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED) as jar:
                jar.writestr("META-INF/", b"")
                jar.writestr(MANIFEST_PATH, manifest)
                for path in sorted(compile_dir.rglob("*")):
                    if not path.is_file():
                        continue
                    arcname = path.relative_to(compile_dir).as_posix()
                    if arcname == MANIFEST_PATH:
                        continue
                    jar.write(path, arcname)
            # The previous jar is only replaced by one that reads back
            if Artifact.load(partial) is None:
                raise PackagingError(f"Packaged jar is unreadable: {partial}")
            os.replace(partial, jar_file)
        except KeyboardInterrupt as ke:
            raise_stage_interrupted(ke, PackagingError, "packaging", [partial])
        except PackagingError:
            partial.unlink(missing_ok=True)
            raise
        except Exception as e:
            partial.unlink(missing_ok=True)
            raise PackagingError(f"Failed to create jar {jar_file.name}: {e}") from e

        if self.show_progress:
            size = jar_file.stat().st_size
            print(f"Created {jar_file.name}: {size:,} bytes")

        return jar_file
