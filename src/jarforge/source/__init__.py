"""Build inputs, per-invocation context and prior build records."""

from .source_set import ResourceFile, SourceSet
from .artifact import (
    ATTR_AGENT_CLASS,
    ATTR_BUILD_JDK,
    ATTR_DEPS_FINGERPRINT,
    ATTR_JAVA_OPTIONS,
    ATTR_MAIN_CLASS,
    ATTR_PREMAIN_CLASS,
    Artifact,
    class_path_fingerprint,
)
from .build_context import BuildContext, ResolvedClassPath

__all__ = [
    "ResourceFile",
    "SourceSet",
    "Artifact",
    "class_path_fingerprint",
    "BuildContext",
    "ResolvedClassPath",
    "ATTR_AGENT_CLASS",
    "ATTR_BUILD_JDK",
    "ATTR_DEPS_FINGERPRINT",
    "ATTR_JAVA_OPTIONS",
    "ATTR_MAIN_CLASS",
    "ATTR_PREMAIN_CLASS",
]
