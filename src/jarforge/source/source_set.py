"""The resolved inputs of a single build."""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional


@dataclass
class ResourceFile:
    """A file copied verbatim into the jar.

    Attributes:
        source: File on disk
        target: Path inside the jar, using forward slashes
    """

    source: Path
    target: str


@dataclass
class SourceSet:
    """Sources, resources and declared settings for one jar.

    The caller owns the SourceSet. The build only annotates it: the
    discovered main class, agent classes, and runtime options contributed
    by integrations.

    Attributes:
        sources: Source files handed to the compiler
        jar_file: Where the jar is written
        resources: Files copied into the jar unmodified
        main_source: The file the user ran (None when read from stdin)
        java_version: Declared Java version, e.g. "11+"
        runtime_options: JVM options recorded in the manifest
        compile_options: Extra compiler flags
        gav: Optional group:artifact[:version] coordinate
        main_class: Explicit or discovered main class
        agent: Whether the main source is a java agent
        agent_main_class: Discovered Agent-Class
        premain_class: Discovered Premain-Class
        manifest_attributes: Extra manifest attributes
        description: Free-text description for the descriptor file
    """

    sources: List[Path]
    jar_file: Path
    resources: List[ResourceFile] = field(default_factory=list)
    main_source: Optional[Path] = None
    java_version: Optional[str] = None
    runtime_options: List[str] = field(default_factory=list)
    compile_options: List[str] = field(default_factory=list)
    gav: Optional[str] = None
    main_class: Optional[str] = None
    agent: bool = False
    agent_main_class: Optional[str] = None
    premain_class: Optional[str] = None
    manifest_attributes: Dict[str, str] = field(default_factory=dict)
    description: Optional[str] = None

    def add_runtime_options(self, options: Iterable[str]) -> None:
        self.runtime_options.extend(options)

    def input_files(self) -> List[Path]:
        """Every file whose change makes the jar stale."""
        files = list(self.sources)
        files.extend(r.source for r in self.resources)
        return files

    def base_name(self) -> Optional[str]:
        """File name of the main source without its extension."""
        if self.main_source is None:
            return None
        return self.main_source.stem

    def copy_resources_to(self, target_dir: Path) -> None:
        """Copy all resource files into ``target_dir`` at their jar paths."""
        for resource in self.resources:
            destination = target_dir / resource.target
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(resource.source, destination)
