"""Built-in step discovery."""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType

from reclaim.core.registry import StepRegistry
from reclaim.models.step import CleanupStep, PackageStep, ResourceScanStep

log = logging.getLogger(__name__)

# Abstract base classes that should not be instantiated
_ABSTRACT_BASES = {CleanupStep, PackageStep, ResourceScanStep}


def _find_steps_in_module(module: ModuleType) -> list[type[CleanupStep]]:
    """Find all concrete CleanupStep subclasses defined in a module."""
    steps: list[type[CleanupStep]] = []
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if not issubclass(obj, CleanupStep) or obj in _ABSTRACT_BASES:
            continue
        if inspect.isabstract(obj) or obj.__module__ != module.__name__:
            continue
        steps.append(obj)
    return steps


def _load_builtin_steps() -> list[type[CleanupStep]]:
    """Load steps from the reclaim.steps package."""
    import reclaim.steps as steps_pkg

    found: list[type[CleanupStep]] = []
    for _importer, modname, _ispkg in pkgutil.iter_modules(steps_pkg.__path__):
        try:
            module = importlib.import_module(f"reclaim.steps.{modname}")
            found.extend(_find_steps_in_module(module))
        except Exception:
            log.exception("Failed to load built-in step module: %s", modname)
    return found


def load_steps(registry: StepRegistry) -> None:
    """Discover, instantiate and register every built-in step."""
    for cls in _load_builtin_steps():
        try:
            registry.register(cls())
        except Exception:
            log.exception("Failed to instantiate step: %s", cls.__name__)

    log.info("Loaded %d steps", len(registry))
