"""
Build pipeline components for jarforge.

This module provides the build implementation including:
- Freshness checking of previously built jars
- Compilation (javac/kotlinc) with integrations and main discovery
- Jar packaging
- Native image generation
- Build orchestration
"""

from .orchestrator import BuildOrchestrator, BuildResult
from .freshness import FreshnessChecker, FreshnessDecision
from .compile_pipeline import (
    CompileError,
    CompilePipeline,
    JavaCompilePipeline,
    KotlinCompilePipeline,
    pipeline_for,
)
from .packager import Packager, PackagingError, build_manifest
from .native_image import NativeBuildError, NativeImageBuilder, image_name
from .main_finder import EntryPoints, discover_entry_points, index_classes
from .class_index import ClassFormatError, ClassIndex, ClassIndexer, ClassInfo

__all__ = [
    'BuildOrchestrator',
    'BuildResult',
    'FreshnessChecker',
    'FreshnessDecision',
    'CompileError',
    'CompilePipeline',
    'JavaCompilePipeline',
    'KotlinCompilePipeline',
    'pipeline_for',
    'Packager',
    'PackagingError',
    'build_manifest',
    'NativeBuildError',
    'NativeImageBuilder',
    'image_name',
    'EntryPoints',
    'discover_entry_points',
    'index_classes',
    'ClassFormatError',
    'ClassIndex',
    'ClassIndexer',
    'ClassInfo',
]
