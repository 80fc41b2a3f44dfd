"""
Command-line interface for jarforge.

This module provides the `jarforge` CLI tool for building jars from
Java and Kotlin sources.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from . import __version__
from .build import BuildOrchestrator
from .cli_utils import ErrorFormatter, OptionParser, PathValidator
from .config import BuildSettings
from .errors import BuildError
from .log_utils import setup_logging
from .source import BuildContext, SourceSet
from .spi import StaticDependencyResolver


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    sources: List[Path]
    jar: Optional[Path] = None
    main: Optional[str] = None
    java: Optional[str] = None
    native: bool = False
    fresh: bool = False
    agent: bool = False
    gav: Optional[str] = None
    class_path: List[Path] = field(default_factory=list)
    resources: List[str] = field(default_factory=list)
    properties: List[str] = field(default_factory=list)
    runtime_options: List[str] = field(default_factory=list)
    compile_options: List[str] = field(default_factory=list)
    config: Optional[Path] = None
    log_file: Optional[Path] = None
    verbose: bool = False


def default_jar_path(main_source: Path) -> Path:
    """``hello.java`` builds ``hello.jar`` next to it."""
    return main_source.with_suffix(".jar")


def create_build(args: BuildArgs, settings: BuildSettings) -> BuildOrchestrator:
    """Turn parsed arguments into an orchestrator for one build.

    Raises:
        ValueError: If a -D or --resource value is malformed
    """
    main_source = args.sources[0]
    ss = SourceSet(
        sources=list(args.sources),
        jar_file=args.jar if args.jar is not None else default_jar_path(main_source),
        resources=OptionParser.parse_resources(args.resources),
        main_source=main_source,
        runtime_options=list(args.runtime_options),
        compile_options=list(args.compile_options),
        gav=args.gav,
        agent=args.agent,
    )
    ctx = BuildContext(
        settings=settings,
        resolver=StaticDependencyResolver(args.class_path) if args.class_path else None,
        java_version=args.java,
        main_class=args.main,
        native_image=args.native or settings.native,
        properties=OptionParser.parse_properties(args.properties),
    )
    return BuildOrchestrator(ss, ctx, fresh=args.fresh or settings.fresh)


def build_command(args: BuildArgs) -> None:
    """Build a jar (and optionally a native image) from sources.

    Examples:
        jarforge build hello.java                  # Build hello.jar
        jarforge build hello.java --java 17+       # Require Java 17 or newer
        jarforge build app.java --native           # Also build app.jar.bin
        jarforge build app.java --fresh            # Ignore the previous jar
        jarforge build app.java -R=-Xmx1g          # Record a JVM option
    """
    PathValidator.validate_sources(args.sources)

    try:
        settings = BuildSettings.load(config_path=args.config)
        verbose = args.verbose or settings.verbose
        setup_logging(verbose=verbose, log_file=args.log_file)

        orchestrator = create_build(args, settings)
        result = orchestrator.run()

        if result.success:
            if result.rebuilt:
                ErrorFormatter.print_success("Build successful!")
            else:
                ErrorFormatter.print_success("Up to date")
            print()
            print(f"Jar: {result.artifact.path}")
            if result.artifact.main_class:
                print(f"Main-Class: {result.artifact.main_class}")
            if result.native_image_path is not None:
                print(f"Native image: {result.native_image_path}")
            print(f"Build time: {result.build_time:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.print_error("Build failed!", result.message)
            sys.exit(result.exit_code)

    except (BuildError, ValueError) as e:
        ErrorFormatter.print_error("Build failed!", str(e))
        sys.exit(getattr(e, "exit_code", 1))
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main(argv: Optional[List[str]] = None) -> None:
    """jarforge - incremental jar builder."""
    parser = argparse.ArgumentParser(
        prog="jarforge",
        description="jarforge - incremental jar builder for Java and Kotlin sources",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"jarforge {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser(
        "build",
        help="Build a jar from sources",
    )
    build_parser.add_argument(
        "sources",
        nargs="+",
        type=Path,
        help="Source files; the first one is the main source",
    )
    build_parser.add_argument(
        "-o",
        "--jar",
        type=Path,
        default=None,
        help="Jar to build (default: main source with a .jar extension)",
    )
    build_parser.add_argument(
        "-m",
        "--main",
        default=None,
        help="Main class (default: discovered from the compiled classes)",
    )
    build_parser.add_argument(
        "-j",
        "--java",
        default=None,
        help="Java version to build with, e.g. 17 or 11+",
    )
    build_parser.add_argument(
        "-n",
        "--native",
        action="store_true",
        help="Also build a native image with GraalVM",
    )
    build_parser.add_argument(
        "--fresh",
        action="store_true",
        help="Rebuild even if the previous jar is up to date",
    )
    build_parser.add_argument(
        "--agent",
        action="store_true",
        help="Build a java agent (discovers Agent-Class and Premain-Class)",
    )
    build_parser.add_argument(
        "--gav",
        default=None,
        help="group:artifact[:version] written to the pom descriptor",
    )
    build_parser.add_argument(
        "--cp",
        "--class-path",
        dest="class_path",
        action="append",
        type=Path,
        default=[],
        help="Dependency jar (repeatable)",
    )
    build_parser.add_argument(
        "--resource",
        dest="resources",
        action="append",
        default=[],
        help="Resource to add, as target=source or source (repeatable)",
    )
    build_parser.add_argument(
        "-D",
        dest="properties",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Property visible to integrations (repeatable)",
    )
    build_parser.add_argument(
        "-R",
        "--runtime-option",
        dest="runtime_options",
        action="append",
        default=[],
        metavar="OPTION",
        help="JVM option recorded in the manifest (repeatable); attach the value, as in -R=-Xmx1g",
    )
    build_parser.add_argument(
        "-C",
        "--compile-option",
        dest="compile_options",
        action="append",
        default=[],
        metavar="OPTION",
        help="Option passed to the compiler (repeatable); attach the value, as in -C=-parameters",
    )
    build_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: $JARFORGE_CONFIG or ~/.jarforge/jarforge.ini)",
    )
    build_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file",
    )
    build_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show build decisions and command lines",
    )

    parsed_args = parser.parse_args(argv)

    if parsed_args.command == "build":
        build_args = BuildArgs(
            sources=[s.resolve() for s in parsed_args.sources],
            jar=parsed_args.jar,
            main=parsed_args.main,
            java=parsed_args.java,
            native=parsed_args.native,
            fresh=parsed_args.fresh,
            agent=parsed_args.agent,
            gav=parsed_args.gav,
            class_path=parsed_args.class_path,
            resources=parsed_args.resources,
            properties=parsed_args.properties,
            runtime_options=parsed_args.runtime_options,
            compile_options=parsed_args.compile_options,
            config=parsed_args.config,
            log_file=parsed_args.log_file,
            verbose=parsed_args.verbose,
        )
        build_command(build_args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
