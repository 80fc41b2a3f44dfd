"""Artifact freshness check.

Decides whether an existing jar can be reused instead of compiling.
The first matching rule wins:

    1. fresh build requested               -> rebuild
    2. native image requested but missing  -> rebuild
    3. no jar at the target path           -> rebuild
    4. jar metadata unreadable             -> rebuild
    5. jar or its dependencies out of date -> rebuild
    6. requested Java < jar's build Java   -> rebuild
    7. otherwise                           -> reuse

Rule 6 only forbids downgrades: a jar built with an older JDK than the
one requested is reused.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config.jdk import java_version, min_requested_version
from ..source import Artifact, BuildContext, SourceSet
from .native_image import image_name

REASON_FRESH = "fresh build explicitly requested"
REASON_NATIVE = "native build required"
REASON_NOT_FOUND = "not found"
REASON_UNREADABLE = "previous jar unreadable"
REASON_OUT_OF_DATE = "previous jar or its dependencies not up-to-date"
REASON_UP_TO_DATE = "up-to-date"


@dataclass(frozen=True)
class FreshnessDecision:
    """Outcome of the freshness check.

    Attributes:
        rebuild_required: Whether the jar must be built
        reason: Human-readable reason
        artifact: The reusable artifact when no rebuild is required
    """

    rebuild_required: bool
    reason: str
    artifact: Optional[Artifact] = None


def native_build_required(ctx: BuildContext, jar_file: Path) -> bool:
    return ctx.native_image and not image_name(jar_file).exists()


class FreshnessChecker:
    """Checks whether the jar for a SourceSet can be reused."""

    def __init__(self, fresh: bool = False):
        self.fresh = fresh

    def check(self, ss: SourceSet, ctx: BuildContext) -> FreshnessDecision:
        jar_file = ss.jar_file

        if self.fresh:
            return self._rebuild(REASON_FRESH)
        if native_build_required(ctx, jar_file):
            return self._rebuild(REASON_NATIVE)
        if not jar_file.is_file():
            return self._rebuild(REASON_NOT_FOUND)

        artifact = Artifact.load(jar_file)
        if artifact is None:
            return self._rebuild(REASON_UNREADABLE)
        if not artifact.is_up_to_date(ss, ctx):
            return self._rebuild(REASON_OUT_OF_DATE)

        requested = ctx.get_java_version_or(ss)
        requested_major = java_version(requested, ctx.settings)
        built_with = min_requested_version(artifact.java_version)
        if requested_major < built_with:
            return self._rebuild(
                f"requested Java version {requested_major} < than the Java version "
                f"used during last build {artifact.java_version}"
            )

        logging.debug(f"No build required. Reusing jar from {jar_file}")
        return FreshnessDecision(False, REASON_UP_TO_DATE, artifact)

    @staticmethod
    def _rebuild(reason: str) -> FreshnessDecision:
        logging.debug(f"Building as {reason}")
        return FreshnessDecision(True, reason)
