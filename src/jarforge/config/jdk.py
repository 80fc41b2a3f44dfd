"""JDK version parsing and tool resolution.

Version strings accepted everywhere a Java version is requested or recorded:
    "8", "1.8", "11", "11+", "17.0.2", "21-ea"

A trailing "+" means "this version or newer". Legacy "1.x" strings map to x.
"""

import logging
import platform
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from .settings import BuildSettings

DEFAULT_JAVA_VERSION = 11

_VERSION_RE = re.compile(r"^\s*(\d+)(?:\.(\d+))?")
_RELEASE_RE = re.compile(r'^JAVA_VERSION="([^"]+)"', re.MULTILINE)
_JAVA_DASH_VERSION_RE = re.compile(r'version "([^"]+)"')

_detected_default: Optional[int] = None


def parse_java_version(version: Optional[str]) -> int:
    """Parse a Java version string into its major version.

    Args:
        version: Version string, may be None

    Returns:
        Major version, or 0 when the string is empty or unparseable
    """
    if not version:
        return 0
    match = _VERSION_RE.match(version)
    if not match:
        return 0
    major = int(match.group(1))
    if major == 1 and match.group(2):
        return int(match.group(2))
    return major


def is_open_version(version: Optional[str]) -> bool:
    """True when the version is a minimum ("11+") rather than exact."""
    return bool(version) and version.strip().endswith("+")


def min_requested_version(version: Optional[str]) -> int:
    """Lowest major version that satisfies the given version string."""
    return parse_java_version(version)


def format_build_jdk(major: int) -> str:
    """Format a major version the way Build-Jdk has always been written."""
    return str(major) if major >= 9 else f"1.{major}"


def java_version(requested: Optional[str], settings: BuildSettings) -> int:
    """Major version to build with for a requested version string.

    Args:
        requested: Requested version (None means "whatever the default JDK is")
        settings: Build settings used to locate the default JDK

    Returns:
        Major Java version
    """
    major = parse_java_version(requested)
    if major > 0:
        return major
    return detect_default_java_version(settings)


def detect_default_java_version(settings: BuildSettings) -> int:
    """Detect the major version of the default JDK.

    Looks at JAVA_HOME's release file first, then asks ``java -version``.
    Falls back to DEFAULT_JAVA_VERSION when neither works. The result is
    cached for the life of the process.
    """
    global _detected_default
    if _detected_default is not None:
        return _detected_default

    detected = 0
    if settings.java_home is not None:
        release = settings.java_home / "release"
        if release.exists():
            match = _RELEASE_RE.search(release.read_text(encoding="utf-8", errors="replace"))
            if match:
                detected = parse_java_version(match.group(1))

    if detected == 0:
        java = resolve_in_java_home("java", None, settings, detect=False)
        try:
            result = subprocess.run(
                [java, "-version"],
                capture_output=True,
                text=True,
                timeout=30,
            )
            match = _JAVA_DASH_VERSION_RE.search(result.stderr + result.stdout)
            if match:
                detected = parse_java_version(match.group(1))
        except (OSError, subprocess.TimeoutExpired) as e:
            logging.debug(f"Could not run {java} -version: {e}")

    if detected == 0:
        logging.debug(f"Unable to detect default Java version, assuming {DEFAULT_JAVA_VERSION}")
        detected = DEFAULT_JAVA_VERSION

    _detected_default = detected
    return detected


def reset_detected_version() -> None:
    """Forget the cached default Java version."""
    global _detected_default
    _detected_default = None


def search_path(cmd: str, directory: Path) -> Optional[Path]:
    """Find an executable named ``cmd`` in ``directory``.

    On Windows the usual executable extensions are tried as well.
    """
    candidates = [cmd]
    if platform.system() == "Windows":
        candidates = [f"{cmd}.exe", f"{cmd}.cmd", f"{cmd}.bat", cmd]
    for name in candidates:
        path = directory / name
        if path.is_file():
            return path
    return None


def resolve_java_home(requested: Optional[str], settings: BuildSettings, detect: bool = True) -> Optional[Path]:
    """Pick the JDK home that should serve a requested version.

    An exact match among the configured [jdks] wins. For an open version
    ("11+") the lowest configured JDK at or above the minimum is used.
    Otherwise JAVA_HOME is used, if set.
    """
    major = parse_java_version(requested)
    if major == 0 and detect and settings.jdk_homes:
        major = detect_default_java_version(settings)

    if major > 0:
        exact = settings.jdk_home_for(major)
        if exact is not None:
            return exact
        if is_open_version(requested):
            newer = sorted(v for v in settings.jdk_homes if v >= major)
            if newer:
                return settings.jdk_homes[newer[0]]

    return settings.java_home


def resolve_in_java_home(
    cmd: str,
    requested: Optional[str],
    settings: BuildSettings,
    detect: bool = True,
) -> str:
    """Resolve a JDK tool (javac, java, native-image, ...) to a runnable path.

    Args:
        cmd: Tool name without extension
        requested: Requested Java version, may be None
        settings: Build settings
        detect: Whether the default JDK version may be detected

    Returns:
        Absolute tool path when found, otherwise the bare command name so
        the operating system searches PATH
    """
    home = resolve_java_home(requested, settings, detect=detect)
    if home is not None:
        found = search_path(cmd, home / "bin")
        if found is not None:
            return str(found)
    on_path = shutil.which(cmd)
    return on_path if on_path else cmd
