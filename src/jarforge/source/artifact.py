"""Metadata of a previously built jar.

An Artifact is read back from a jar's manifest and used only to decide
whether that jar can be reused. It is never modified.
"""

import hashlib
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from ..argument_escaper import split_persisted
from ..config.jdk import parse_java_version
from .manifest import MANIFEST_PATH, ManifestError, parse_manifest
from .source_set import SourceSet

if TYPE_CHECKING:
    from .build_context import BuildContext

# Attribute keys must stay stable: older jars are read back with them.
ATTR_MANIFEST_VERSION = "Manifest-Version"
ATTR_MAIN_CLASS = "Main-Class"
ATTR_BUILD_JDK = "Build-Jdk"
ATTR_JAVA_OPTIONS = "Jarforge-Java-Options"
ATTR_DEPS_FINGERPRINT = "Jarforge-Deps-Fingerprint"
ATTR_AGENT_CLASS = "Agent-Class"
ATTR_PREMAIN_CLASS = "Premain-Class"


def class_path_fingerprint(class_path: str) -> str:
    """Short SHA256 of a resolved class path string."""
    return hashlib.sha256(class_path.encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class Artifact:
    """A jar on disk together with its manifest attributes."""

    path: Path
    attributes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> Optional["Artifact"]:
        """Read the artifact metadata from a jar.

        Returns:
            Artifact, or None if the file is missing, not a zip, or has
            an unreadable manifest
        """
        try:
            with zipfile.ZipFile(path) as jar:
                try:
                    data = jar.read(MANIFEST_PATH)
                except KeyError:
                    data = b""
            attributes = parse_manifest(data) if data else {}
        except (OSError, zipfile.BadZipFile, ManifestError, UnicodeDecodeError) as e:
            logging.debug(f"Could not read jar metadata from {path}: {e}")
            return None
        return cls(path=path, attributes=attributes)

    @property
    def main_class(self) -> Optional[str]:
        return self.attributes.get(ATTR_MAIN_CLASS)

    @property
    def agent_main_class(self) -> Optional[str]:
        return self.attributes.get(ATTR_AGENT_CLASS)

    @property
    def premain_class(self) -> Optional[str]:
        return self.attributes.get(ATTR_PREMAIN_CLASS)

    @property
    def build_jdk(self) -> int:
        """Major version of the JDK that compiled the jar (0 if unknown)."""
        return parse_java_version(self.attributes.get(ATTR_BUILD_JDK))

    @property
    def java_version(self) -> Optional[str]:
        """Minimum Java version able to run the jar, e.g. "17+"."""
        jdk = self.build_jdk
        return f"{jdk}+" if jdk > 0 else None

    @property
    def runtime_options(self) -> List[str]:
        options = self.attributes.get(ATTR_JAVA_OPTIONS, "")
        try:
            return split_persisted(options)
        except ValueError as e:
            logging.warning(f"Ignoring malformed {ATTR_JAVA_OPTIONS} in {self.path}: {e}")
            return []

    @property
    def deps_fingerprint(self) -> str:
        # Jars without the attribute were built without dependencies.
        return self.attributes.get(ATTR_DEPS_FINGERPRINT, class_path_fingerprint(""))

    def is_up_to_date(self, ss: SourceSet, ctx: "BuildContext") -> bool:
        """Check the jar against its inputs and dependencies.

        The jar is stale when it is gone, when any input is missing or newer
        than the jar, when the resolved class path changed, or when a
        dependency artifact disappeared.
        """
        try:
            jar_mtime = self.path.stat().st_mtime
        except OSError:
            return False

        for input_file in ss.input_files():
            try:
                if input_file.stat().st_mtime > jar_mtime:
                    logging.debug(f"{input_file} is newer than {self.path}")
                    return False
            except OSError:
                logging.debug(f"Input {input_file} no longer exists")
                return False

        class_path = ctx.resolve_class_path(ss)
        if class_path_fingerprint(class_path.class_path) != self.deps_fingerprint:
            logging.debug(f"Resolved class path changed since {self.path} was built")
            return False

        missing = [a for a in class_path.artifacts if not a.exists()]
        if missing:
            logging.debug(f"Dependencies missing: {', '.join(str(m) for m in missing)}")
            return False

        return True
