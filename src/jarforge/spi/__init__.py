"""Interfaces to the collaborators the build calls out to."""

from .resolver import IDependencyResolver, StaticDependencyResolver
from .integration import (
    IIntegrationHooks,
    IntegrationHook,
    IntegrationManager,
    IntegrationRequest,
    IntegrationResult,
)
from .templates import DescriptorTemplate, ITemplateEngine, PackageTemplateEngine, TemplateError

__all__ = [
    "IDependencyResolver",
    "StaticDependencyResolver",
    "IIntegrationHooks",
    "IntegrationHook",
    "IntegrationManager",
    "IntegrationRequest",
    "IntegrationResult",
    "DescriptorTemplate",
    "ITemplateEngine",
    "PackageTemplateEngine",
    "TemplateError",
]
