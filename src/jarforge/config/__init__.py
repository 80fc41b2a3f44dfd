"""Configuration modules for jarforge."""

from .settings import BuildSettings, SettingsError, Shell, detect_shell
from .jdk import (
    DEFAULT_JAVA_VERSION,
    java_version,
    min_requested_version,
    parse_java_version,
    resolve_in_java_home,
)
from .properties import get_property, override_properties, system_properties

__all__ = [
    "BuildSettings",
    "SettingsError",
    "Shell",
    "detect_shell",
    "DEFAULT_JAVA_VERSION",
    "java_version",
    "min_requested_version",
    "parse_java_version",
    "resolve_in_java_home",
    "get_property",
    "override_properties",
    "system_properties",
]
