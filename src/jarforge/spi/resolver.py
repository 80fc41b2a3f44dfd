"""Dependency resolver interface.

Coordinate resolution happens elsewhere; the build only asks for the
resulting class path.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from ..source import ResolvedClassPath, SourceSet


class IDependencyResolver(ABC):
    """Computes the class path for a SourceSet."""

    @abstractmethod
    def resolve_class_path(self, ss: SourceSet) -> ResolvedClassPath:
        """Resolve the class path for the given source set.

        Args:
            ss: Source set whose dependencies should be resolved

        Returns:
            ResolvedClassPath with the joined path and artifact list
        """
        pass


class StaticDependencyResolver(IDependencyResolver):
    """Resolver over an already known list of jars.

    Useful when the caller resolved dependencies up front, and in tests.
    """

    def __init__(self, artifacts: Optional[List[Path]] = None, coordinates: Optional[Dict[Path, str]] = None):
        self.artifacts = list(artifacts or [])
        self.coordinates = dict(coordinates or {})

    def resolve_class_path(self, ss: SourceSet) -> ResolvedClassPath:
        return ResolvedClassPath(
            class_path=os.pathsep.join(str(a) for a in self.artifacts),
            artifacts=list(self.artifacts),
            coordinates=[self.coordinates[a] for a in self.artifacts if a in self.coordinates],
        )
