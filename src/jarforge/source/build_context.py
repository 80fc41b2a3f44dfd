"""Per-invocation build configuration."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from ..config.settings import BuildSettings
from ..errors import ConfigurationWarning
from .artifact import Artifact
from .source_set import SourceSet

if TYPE_CHECKING:
    from ..spi.resolver import IDependencyResolver


@dataclass
class ResolvedClassPath:
    """Class path as computed by the dependency resolver.

    Attributes:
        class_path: Platform path-separator joined class path (may be empty)
        artifacts: Dependency files making up the class path
        coordinates: group:artifact:version of each artifact, where known
    """

    class_path: str = ""
    artifacts: List[Path] = field(default_factory=list)
    coordinates: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.class_path.strip()


@dataclass
class BuildContext:
    """What was asked of this invocation, and what the build found out.

    Created once per invocation. The compile pipeline writes build_jdk and
    main_class; the packager and native image pipeline read them.
    """

    settings: BuildSettings = field(default_factory=BuildSettings)
    resolver: Optional["IDependencyResolver"] = None
    java_version: Optional[str] = None
    main_class: Optional[str] = None
    native_image: bool = False
    properties: Dict[str, str] = field(default_factory=dict)
    build_jdk: int = 0
    runtime_options: List[str] = field(default_factory=list)
    warnings: List[ConfigurationWarning] = field(default_factory=list)
    _class_path: Optional[ResolvedClassPath] = field(default=None, repr=False)

    def get_java_version_or(self, ss: SourceSet) -> Optional[str]:
        """Requested Java version: invocation override, then the source's."""
        if self.java_version is not None:
            return self.java_version
        if ss.java_version is not None:
            return ss.java_version
        return self.settings.java_version

    def get_main_class_or(self, ss: SourceSet) -> Optional[str]:
        return self.main_class if self.main_class is not None else ss.main_class

    def resolve_class_path(self, ss: SourceSet) -> ResolvedClassPath:
        """Resolve (once) the class path for the source set."""
        if self._class_path is None:
            if self.resolver is None:
                self._class_path = ResolvedClassPath()
            else:
                self._class_path = self.resolver.resolve_class_path(ss)
        return self._class_path

    def warn(self, category: str, message: str) -> None:
        warning = ConfigurationWarning(category, message)
        self.warnings.append(warning)
        logging.warning(str(warning))

    def import_jar_metadata_for(self, artifact: Artifact) -> Artifact:
        """Adopt the metadata of a reused jar instead of compiling.

        An explicit main class on this context is kept.
        """
        if self.main_class is None:
            self.main_class = artifact.main_class
        self.runtime_options = artifact.runtime_options
        self.build_jdk = artifact.build_jdk
        return artifact
