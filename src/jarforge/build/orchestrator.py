"""
Build orchestration for jarforge.

This module sequences a complete build:

    CHECK_FRESHNESS -> REUSE | COMPILE -> PACKAGE -> NATIVE_BUILD | DONE

- Freshness check (may reuse the previous jar)
- Compilation into a scratch directory, with integrations and main discovery
- Packaging into the jar
- Optional native image, or moving in an integration-supplied binary

The scratch directory exists only while compiling and packaging; it is
removed whether or not they succeed.
"""

import logging
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..errors import BuildError, ConfigurationWarning
from ..source import Artifact, BuildContext, SourceSet
from ..spi.integration import IIntegrationHooks, IntegrationResult
from ..spi.templates import ITemplateEngine
from .build_utils import scratch_directory
from .compile_pipeline import CompileError, CompilePipeline, pipeline_for
from .freshness import FreshnessChecker, FreshnessDecision, native_build_required
from .native_image import NativeBuildError, NativeImageBuilder, image_name
from .packager import Packager, PackagingError


@dataclass
class BuildResult:
    """Result of a complete build operation."""

    success: bool
    artifact: Optional[Artifact]
    rebuilt: bool
    native_image_path: Optional[Path]
    build_time: float
    message: str
    exit_code: int = 0
    warnings: List[ConfigurationWarning] = field(default_factory=list)


class BuildOrchestrator:
    """
    Orchestrates the build of one SourceSet into a jar (and native image).

    Example usage:
        orchestrator = BuildOrchestrator(ss, ctx)
        artifact = orchestrator.build()
        print(f"Jar: {artifact.path} main: {artifact.main_class}")

    ``build()`` raises on failure; ``run()`` reports failure in a
    BuildResult instead.
    """

    def __init__(
        self,
        ss: SourceSet,
        ctx: BuildContext,
        integrations: Optional[IIntegrationHooks] = None,
        template_engine: Optional[ITemplateEngine] = None,
        pipeline: Optional[CompilePipeline] = None,
        packager: Optional[Packager] = None,
        native_builder: Optional[NativeImageBuilder] = None,
        fresh: Optional[bool] = None,
        show_progress: bool = True,
    ):
        """
        Initialize build orchestrator.

        Args:
            ss: Source set to build
            ctx: Build context for this invocation
            integrations: Post-compile hooks
            template_engine: Descriptor template lookup
            pipeline: Compile pipeline (default: picked from the main source)
            packager: Jar packager
            native_builder: Native image builder
            fresh: Force a rebuild (default: from settings)
            show_progress: Whether to print progress lines
        """
        self.ss = ss
        self.ctx = ctx
        self.show_progress = show_progress
        self.fresh = ctx.settings.fresh if fresh is None else fresh
        self.pipeline = pipeline or pipeline_for(
            ss,
            ctx,
            integrations=integrations,
            template_engine=template_engine,
            show_progress=show_progress,
        )
        self.packager = packager or Packager(show_progress=show_progress)
        self.native_builder = native_builder or NativeImageBuilder(show_progress=show_progress)
        self.decision: Optional[FreshnessDecision] = None
        self.native_image_path: Optional[Path] = None

    def build(self) -> Artifact:
        """
        Build the jar, or reuse the existing one when it is fresh.

        Returns:
            The Artifact at the target jar path

        Raises:
            CompileError: If compilation or integrations fail
            PackagingError: If the jar cannot be written
            NativeBuildError: If the native image cannot be produced
        """
        jar_file = self.ss.jar_file
        integration_result = IntegrationResult()

        self.decision = FreshnessChecker(self.fresh).check(self.ss, self.ctx)

        if not self.decision.rebuild_required:
            result = self.ctx.import_jar_metadata_for(self.decision.artifact)
        else:
            logging.info(f"Building {jar_file.name}: {self.decision.reason}")
            integration_result = self._compile_and_package(jar_file)
            loaded = Artifact.load(jar_file)
            if loaded is None:
                raise PackagingError(f"Packaged jar is unreadable: {jar_file}")
            result = loaded

        if self.ctx.native_image:
            # A rebuilt jar makes any existing native binary stale
            if self.decision.rebuild_required or native_build_required(self.ctx, jar_file):
                self.native_image_path = self._native_build(jar_file, integration_result)
            else:
                self.native_image_path = image_name(jar_file)

        return result

    def run(self) -> BuildResult:
        """Like build(), but reports failures in the returned BuildResult."""
        start_time = time.time()
        try:
            artifact = self.build()
            return BuildResult(
                success=True,
                artifact=artifact,
                rebuilt=bool(self.decision and self.decision.rebuild_required),
                native_image_path=self.native_image_path,
                build_time=time.time() - start_time,
                message="Build successful",
                warnings=list(self.ctx.warnings),
            )
        except BuildError as e:
            logging.error(f"Build failed: {e}")
            return BuildResult(
                success=False,
                artifact=None,
                rebuilt=bool(self.decision and self.decision.rebuild_required),
                native_image_path=None,
                build_time=time.time() - start_time,
                message=str(e),
                exit_code=e.exit_code,
                warnings=list(self.ctx.warnings),
            )

    def _compile_and_package(self, jar_file: Path) -> IntegrationResult:
        try:
            with scratch_directory(self.pipeline.compile_dir) as compile_dir:
                integration_result = self.pipeline.compile()
                self.packager.package(self.ss, self.ctx, compile_dir, jar_file)
        except OSError as e:
            raise CompileError(f"Compile directory error: {e}") from e
        return integration_result

    def _native_build(self, jar_file: Path, integration_result: IntegrationResult) -> Path:
        target = image_name(jar_file)
        if integration_result.native_image_path is not None:
            logging.info(f"Using native image produced by integration: {integration_result.native_image_path}")
            try:
                shutil.move(str(integration_result.native_image_path), str(target))
            except OSError as e:
                raise NativeBuildError(f"Failed to move native image into place: {e}") from e
            return target
        return self.native_builder.build_native(self.ss, self.ctx, jar_file)
