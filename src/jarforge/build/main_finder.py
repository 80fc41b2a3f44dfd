"""Entry-point discovery over compiled classes.

Design:
    - Walks the compile directory for top-level .class files (names with
      '$' are nested or anonymous classes and are skipped)
    - Indexes them in sorted path order, so results are deterministic
    - A "main finder" predicate decides which classes are launchable
    - Agent entry points (agentmain/premain) are looked up independently
      of main
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .class_index import (
    INSTRUMENTATION_TYPE,
    STRING_ARRAY_TYPE,
    STRING_TYPE,
    ClassIndex,
    ClassIndexer,
    ClassInfo,
)

MainFinder = Callable[[ClassInfo], bool]


def has_main_method(class_info: ClassInfo) -> bool:
    """``main(String[])``"""
    return class_info.method("main", STRING_ARRAY_TYPE) is not None


def has_main_method_or_no_arg_main(class_info: ClassInfo) -> bool:
    """``main(String[])`` or ``main()``, as Kotlin top-level mains compile."""
    return has_main_method(class_info) or class_info.method("main") is not None


def has_agent_method(class_info: ClassInfo, name: str) -> bool:
    """``name(String, Instrumentation)`` or ``name(String)``"""
    return (
        class_info.method(name, STRING_TYPE, INSTRUMENTATION_TYPE) is not None
        or class_info.method(name, STRING_TYPE) is not None
    )


@dataclass
class EntryPoints:
    """What discovery found in a compile directory.

    Attributes:
        main_class: Chosen main class, if any
        candidates: Every main candidate left after the suggested-name filter
        agent_main_class: First class with an agentmain method (agents only)
        premain_class: First class with a premain method (agents only)
    """

    main_class: Optional[str] = None
    candidates: List[str] = field(default_factory=list)
    agent_main_class: Optional[str] = None
    premain_class: Optional[str] = None

    @property
    def ambiguous(self) -> bool:
        return len(self.candidates) > 1


def find_class_files(compile_dir: Path) -> List[Path]:
    """Top-level class files under ``compile_dir``, sorted."""
    return sorted(
        p for p in compile_dir.rglob("*.class")
        if p.is_file() and "$" not in p.name
    )


def index_classes(compile_dir: Path) -> ClassIndex:
    """Index all top-level classes in ``compile_dir``.

    Raises:
        OSError: If a class file cannot be read
        ClassFormatError: If a class file is malformed
    """
    indexer = ClassIndexer()
    for class_file in find_class_files(compile_dir):
        indexer.index(class_file.read_bytes())
    return indexer.complete()


def discover_entry_points(
    index: ClassIndex,
    main_finder: MainFinder = has_main_method,
    suggested_name: Optional[str] = None,
    agent: bool = False,
) -> EntryPoints:
    """Pick the main class (and agent classes) from an index.

    When several classes have a main method, the one whose simple name
    equals ``suggested_name`` (usually the source file's base name) is
    preferred. Otherwise the first one in index order is chosen and
    ``candidates`` lists them all so the caller can warn.
    """
    classes = index.known_classes
    mains = [c for c in classes if main_finder(c)]

    if len(mains) > 1 and suggested_name is not None:
        suggested = [c for c in mains if c.simple_name == suggested_name]
        if suggested:
            mains = suggested

    result = EntryPoints(candidates=[c.name for c in mains])
    if mains:
        result.main_class = mains[0].name

    if agent:
        agent_mains = [c for c in classes if has_agent_method(c, "agentmain")]
        if agent_mains:
            result.agent_main_class = agent_mains[0].name
        premains = [c for c in classes if has_agent_method(c, "premain")]
        if premains:
            result.premain_class = premains[0].name

    return result
