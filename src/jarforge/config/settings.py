"""
Build settings for jarforge.

Settings come from an optional ini file and are then overridden by
environment variables.

Example jarforge.ini:
    [build]
    fresh = false
    verbose = true
    java = 17
    native = false

    [jdks]
    11 = /usr/lib/jvm/java-11-openjdk
    17 = /usr/lib/jvm/java-17-openjdk

Usage:
    settings = BuildSettings.load()
    javac_home = settings.jdk_home_for(17)
"""

import configparser
import os
import platform
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional

from ..errors import BuildError

DEFAULT_CONFIG_PATH = Path.home() / ".jarforge" / "jarforge.ini"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class SettingsError(BuildError):
    """Exception raised for jarforge.ini configuration errors."""

    pass


class Shell(Enum):
    """Command interpreter the user is running jarforge from."""

    BASH = "bash"
    CMD = "cmd"
    POWERSHELL = "powershell"


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise SettingsError(f"Invalid boolean for {name}: {value!r}")


def detect_shell(environ: Optional[Mapping[str, str]] = None) -> Shell:
    """Detect the interpreter used to launch us.

    Outside Windows this is always bash. On Windows, PowerShell puts at
    least three entries in PSModulePath while cmd.exe inherits fewer.

    Args:
        environ: Environment to inspect (defaults to os.environ)

    Returns:
        Detected Shell
    """
    if platform.system() != "Windows":
        return Shell.BASH
    env = os.environ if environ is None else environ
    module_path = env.get("PSModulePath", "")
    entries = [p for p in module_path.split(os.pathsep) if p]
    return Shell.POWERSHELL if len(entries) >= 3 else Shell.CMD


@dataclass
class BuildSettings:
    """Resolved settings for one jarforge invocation."""

    fresh: bool = False
    verbose: bool = False
    native: bool = False
    java_version: Optional[str] = None
    java_home: Optional[Path] = None
    graalvm_home: Optional[Path] = None
    kotlin_home: Optional[Path] = None
    jdk_homes: Dict[int, Path] = field(default_factory=dict)
    shell: Shell = Shell.BASH

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "BuildSettings":
        """
        Load settings from the ini file and the environment.

        Args:
            config_path: Explicit ini path. Defaults to $JARFORGE_CONFIG or
                ~/.jarforge/jarforge.ini. A missing file is not an error.
            environ: Environment to read overrides from (defaults to os.environ)

        Returns:
            BuildSettings instance

        Raises:
            SettingsError: If the ini file exists but cannot be parsed
        """
        env = os.environ if environ is None else environ

        if config_path is None:
            config_env = env.get("JARFORGE_CONFIG")
            config_path = Path(config_env) if config_env else DEFAULT_CONFIG_PATH

        settings = cls()
        if config_path.exists():
            settings._read_ini(config_path)

        settings._apply_environment(env)
        settings.shell = detect_shell(env)
        return settings

    def _read_ini(self, ini_path: Path) -> None:
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise SettingsError(f"Failed to parse {ini_path}: {e}") from e

        if parser.has_section("build"):
            build = parser["build"]
            if "fresh" in build:
                self.fresh = _parse_bool(build["fresh"], "build.fresh")
            if "verbose" in build:
                self.verbose = _parse_bool(build["verbose"], "build.verbose")
            if "native" in build:
                self.native = _parse_bool(build["native"], "build.native")
            if build.get("java"):
                self.java_version = build["java"].strip()

        if parser.has_section("jdks"):
            for key, value in parser["jdks"].items():
                try:
                    major = int(key)
                except ValueError as e:
                    raise SettingsError(
                        f"Invalid JDK version key in [jdks]: {key!r}"
                    ) from e
                self.jdk_homes[major] = Path(value).expanduser()

    def _apply_environment(self, env: Mapping[str, str]) -> None:
        if "JARFORGE_FRESH" in env:
            self.fresh = _parse_bool(env["JARFORGE_FRESH"], "JARFORGE_FRESH")
        if "JARFORGE_VERBOSE" in env:
            self.verbose = _parse_bool(env["JARFORGE_VERBOSE"], "JARFORGE_VERBOSE")
        if env.get("JARFORGE_JAVA"):
            self.java_version = env["JARFORGE_JAVA"]
        if env.get("JAVA_HOME"):
            self.java_home = Path(env["JAVA_HOME"])
        if env.get("GRAALVM_HOME"):
            self.graalvm_home = Path(env["GRAALVM_HOME"])
        if env.get("KOTLIN_HOME"):
            self.kotlin_home = Path(env["KOTLIN_HOME"])

    def jdk_home_for(self, major: int) -> Optional[Path]:
        """Return the configured JDK home for a major version, if any."""
        return self.jdk_homes.get(major)
