"""Compile pipeline.

This module turns a SourceSet into compiled classes in the scratch compile
directory and runs the post-compile integrations.

Steps:
    1. Build the compiler command line (binary picked for the requested
       Java version, source set flags, class path, output directory)
    2. Copy resources into the compile directory
    3. Generate the pom descriptor (best-effort)
    4. Run the compiler, inheriting standard streams
    5. Record the JDK version used on the BuildContext
    6. Run integrations with the invocation properties overlaid
    7. Discover the main class (and agent classes) when nobody set one
"""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..argument_escaper import escape_os_arguments
from ..config.jdk import java_version, resolve_in_java_home, search_path
from ..config.properties import override_properties
from ..errors import BuildError
from ..source import BuildContext, SourceSet
from ..spi.integration import IIntegrationHooks, IntegrationManager, IntegrationRequest, IntegrationResult
from ..spi.templates import ITemplateEngine, PackageTemplateEngine
from .build_utils import compile_dir_for
from .class_index import ClassFormatError
from .descriptor import generate_pom
from .main_finder import (
    MainFinder,
    discover_entry_points,
    has_main_method,
    has_main_method_or_no_arg_main,
    index_classes,
)
from .process_runner import run_tool


class CompileError(BuildError):
    """Raised when compilation or a post-compile step fails."""
    pass


class CompilePipeline(ABC):
    """Base class for language specific compile pipelines.

    Subclasses provide the compiler binary, the source file extension and,
    optionally, a different notion of what a main class looks like.
    """

    def __init__(
        self,
        ss: SourceSet,
        ctx: BuildContext,
        integrations: Optional[IIntegrationHooks] = None,
        template_engine: Optional[ITemplateEngine] = None,
        show_progress: bool = True,
    ):
        """Initialize compile pipeline.

        Args:
            ss: Source set to compile
            ctx: Build context for this invocation
            integrations: Post-compile hooks (default: none)
            template_engine: Descriptor template lookup (default: bundled templates)
            show_progress: Whether to print progress lines
        """
        self.ss = ss
        self.ctx = ctx
        self.integrations = integrations if integrations is not None else IntegrationManager()
        self.template_engine = template_engine if template_engine is not None else PackageTemplateEngine()
        self.show_progress = show_progress

    @property
    @abstractmethod
    def main_extension(self) -> str:
        """Source file extension, e.g. ".java"."""
        pass

    @abstractmethod
    def get_compiler_binary(self, requested_java_version: Optional[str]) -> str:
        """Resolve the compiler executable for the requested Java version."""
        pass

    def get_main_finder(self) -> MainFinder:
        return has_main_method

    @property
    def compile_dir(self) -> Path:
        return compile_dir_for(self.ss.jar_file)

    def get_suggested_main(self) -> Optional[str]:
        """Simple class name we expect main in: the main source's base name."""
        if self.ss.main_source is None:
            return None
        name = self.ss.main_source.name
        if name.endswith(self.main_extension):
            return name[: -len(self.main_extension)]
        return self.ss.main_source.stem

    def build_command(self, requested_java_version: Optional[str]) -> List[str]:
        cmd = [self.get_compiler_binary(requested_java_version)]
        cmd.extend(self.ss.compile_options)
        class_path = self.ctx.resolve_class_path(self.ss)
        if not class_path.is_empty():
            cmd.extend(["-classpath", class_path.class_path])
        cmd.extend(["-d", str(self.compile_dir.resolve())])
        cmd.extend(str(source) for source in self.ss.sources)
        return cmd

    def compile(self) -> IntegrationResult:
        """Compile the source set into the compile directory.

        The compile directory must already exist.

        Returns:
            Merged result of the integrations

        Raises:
            CompileError: If the compiler fails, is interrupted, or a
                post-compile step fails
        """
        requested = self.ctx.get_java_version_or(self.ss)
        compile_dir = self.compile_dir
        cmd = self.build_command(requested)

        try:
            self.ss.copy_resources_to(compile_dir)
        except OSError as e:
            raise CompileError(f"Failed to copy resources: {e}") from e

        try:
            pom_path = generate_pom(self.ss, self.ctx, compile_dir, self.template_engine)
        except OSError as e:
            self.ctx.warn("descriptor", f"Could not write pom.xml: {e}")
            pom_path = None

        if self.show_progress:
            print(f"Building {'javaagent' if self.ss.agent else 'jar'}...")
        logging.debug("Compile: " + " ".join(escape_os_arguments(cmd, self.ctx.settings.shell)))
        self.run_compiler(cmd)

        self.ctx.build_jdk = java_version(requested, self.ctx.settings)

        result = self.run_integrations(compile_dir, pom_path)

        # A main class set by the user is never replaced
        find_main = self.ctx.get_main_class_or(self.ss) is None
        if find_main and result.main_class:
            self.ctx.main_class = result.main_class
            find_main = False
        find_agent = self.ss.agent and self.ss.agent_main_class is None and self.ss.premain_class is None
        if find_main or find_agent:
            self.search_for_main(compile_dir, find_main=find_main, find_agent=find_agent)

        if result.java_args:
            self.ss.add_runtime_options(result.java_args)

        return result

    def run_compiler(self, cmd: List[str]) -> None:
        run_tool(cmd, CompileError, "compile")

    def run_integrations(self, compile_dir: Path, pom_path: Optional[Path]) -> IntegrationResult:
        """Run the integrations with this invocation's properties in effect.

        The process-wide property table is restored whether or not a hook
        fails.
        """
        with override_properties(self.ctx.properties) as properties:
            request = IntegrationRequest(
                source_set=self.ss,
                context=self.ctx,
                compile_dir=compile_dir,
                descriptor_path=pom_path,
                properties=properties,
            )
            try:
                return self.integrations.run_integrations(request)
            except BuildError:
                raise
            except Exception as e:
                raise CompileError(f"Integration failed: {e}") from e

    def search_for_main(self, compile_dir: Path, find_main: bool = True, find_agent: bool = False) -> None:
        """Discover entry points in the compiled classes and record them on the SourceSet."""
        try:
            index = index_classes(compile_dir)
        except (OSError, ClassFormatError) as e:
            raise CompileError(f"Failed to index compiled classes: {e}") from e

        found = discover_entry_points(
            index,
            main_finder=self.get_main_finder(),
            suggested_name=self.get_suggested_main(),
            agent=find_agent,
        )

        if find_main and found.main_class is not None:
            self.ss.main_class = found.main_class
            if found.ambiguous:
                self.ctx.warn(
                    "main",
                    "Could not locate unique main() method. Use an explicit main class. "
                    "Falling back to use first found: " + ",".join(found.candidates),
                )

        if find_agent:
            if found.agent_main_class is not None:
                self.ss.agent_main_class = found.agent_main_class
            if found.premain_class is not None:
                self.ss.premain_class = found.premain_class


class JavaCompilePipeline(CompilePipeline):
    """Compiles .java sources with javac."""

    @property
    def main_extension(self) -> str:
        return ".java"

    def get_compiler_binary(self, requested_java_version: Optional[str]) -> str:
        return resolve_in_java_home("javac", requested_java_version, self.ctx.settings)


class KotlinCompilePipeline(CompilePipeline):
    """Compiles .kt sources with kotlinc."""

    @property
    def main_extension(self) -> str:
        return ".kt"

    def get_compiler_binary(self, requested_java_version: Optional[str]) -> str:
        kotlin_home = self.ctx.settings.kotlin_home
        if kotlin_home is not None:
            found = search_path("kotlinc", kotlin_home / "bin")
            if found is not None:
                return str(found)
        on_path = shutil.which("kotlinc")
        return on_path if on_path else "kotlinc"

    def get_main_finder(self) -> MainFinder:
        return has_main_method_or_no_arg_main


def pipeline_for(ss: SourceSet, ctx: BuildContext, **kwargs) -> CompilePipeline:
    """Pick the compile pipeline from the main source's extension (Java by default)."""
    main_source = ss.main_source or (ss.sources[0] if ss.sources else None)
    if main_source is not None and main_source.suffix == ".kt":
        return KotlinCompilePipeline(ss, ctx, **kwargs)
    return JavaCompilePipeline(ss, ctx, **kwargs)
