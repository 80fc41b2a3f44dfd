"""Post-compile integration hooks.

Integrations run after a successful compile, see the compiled classes and
the generated descriptor, and may adjust the build: pick a main class, add
JVM options, or hand back a native binary they produced themselves.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..source import BuildContext, SourceSet


@dataclass
class IntegrationResult:
    """What the integrations asked for. Every field is optional."""

    main_class: Optional[str] = None
    java_args: List[str] = field(default_factory=list)
    native_image_path: Optional[Path] = None


@dataclass
class IntegrationRequest:
    """Everything a hook may look at.

    Properties are passed explicitly; hooks should read them from here
    rather than from the process-wide property table.
    """

    source_set: SourceSet
    context: BuildContext
    compile_dir: Path
    descriptor_path: Optional[Path]
    properties: Dict[str, str]


IntegrationHook = Callable[[IntegrationRequest], Optional[IntegrationResult]]


class IIntegrationHooks(ABC):
    """Runs the post-compile integrations for a build."""

    @abstractmethod
    def run_integrations(self, request: IntegrationRequest) -> IntegrationResult:
        pass


class IntegrationManager(IIntegrationHooks):
    """Runs hook callables in registration order and merges their results.

    Merge rules:
        - the first hook naming a main class wins
        - java args are concatenated in hook order
        - the last native image path wins
    """

    def __init__(self, hooks: Optional[List[IntegrationHook]] = None):
        self.hooks: List[IntegrationHook] = list(hooks or [])

    def register(self, hook: IntegrationHook) -> None:
        self.hooks.append(hook)

    def run_integrations(self, request: IntegrationRequest) -> IntegrationResult:
        merged = IntegrationResult()
        for hook in self.hooks:
            name = getattr(hook, "__name__", repr(hook))
            logging.debug(f"Running integration {name}")
            result = hook(request)
            if result is None:
                continue
            if merged.main_class is None and result.main_class:
                merged.main_class = result.main_class
            merged.java_args.extend(result.java_args)
            if result.native_image_path is not None:
                merged.native_image_path = result.native_image_path
        return merged
