"""Finalizer contract, job outcomes, and the finalizer registry.

A *finalizer* is the callback that receives the terminal outcome of an
asynchronous job, exactly once. Jobs do not hold finalizer objects; they
hold a string reference that is resolved through a
:class:`FinalizerRegistry` when the job reaches its finalizing phase, and a
fresh instance is created for every job.

Finalizers are registered explicitly::

    registry = FinalizerRegistry()

    @register_finalizer(registry, "store-user")
    class StoreUser(Finalizer):
        def execute(self, outcome: Outcome) -> None:
            if outcome.ok:
                save(outcome.response.json_body())

or discovered from installed packages through the ``restcall.finalizers``
entry-point group (see :meth:`FinalizerRegistry.discover`)::

    [project.entry-points."restcall.finalizers"]
    store-user = "my_package.finalizers:StoreUser"
"""

from __future__ import annotations

import importlib.metadata
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from restcall.exceptions import FinalizerError, TransportError, ValidationError
from restcall.models import TransportResponse

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "restcall.finalizers"
"""The entry-point group name used for finalizer discovery."""


@dataclass(frozen=True)
class Outcome:
    """Terminal result of a job: exactly one of a response or an error.

    Attributes:
        response: The transport response, whatever its status code.
        error: The transport error when no response could be obtained.
    """

    response: Optional[TransportResponse] = None
    error: Optional[TransportError] = None

    def __post_init__(self) -> None:
        if (self.response is None) == (self.error is None):
            raise ValidationError("An outcome carries exactly one of a response or an error")

    @classmethod
    def success(cls, response: TransportResponse) -> Outcome:
        return cls(response=response)

    @classmethod
    def failure(cls, error: TransportError) -> Outcome:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """True when a response was obtained (not necessarily a 2xx one)."""
        return self.response is not None


class Finalizer(ABC):
    """Base class for job finalizers.

    Subclasses implement :meth:`execute`. The scheduler creates a new
    instance per job through the registered factory and calls
    :meth:`execute` once. A finalizer may enqueue further jobs.
    """

    @abstractmethod
    def execute(self, outcome: Outcome) -> None:
        """Handle the job's terminal *outcome*.

        Branch on :attr:`Outcome.ok` (or ``outcome.error``) to tell a
        failed exchange from a response; branch on
        ``outcome.response.status_code`` for HTTP-level failures.
        """
        ...


FinalizerFactory = Callable[[], Finalizer]


class FinalizerRegistry:
    """Maps finalizer names to zero-argument factories.

    A :class:`Finalizer` subclass is itself a valid factory.
    """

    def __init__(self) -> None:
        self._factories: dict[str, FinalizerFactory] = {}

    def register(self, name: str, factory: FinalizerFactory) -> None:
        """Register *factory* under *name*.

        Raises:
            FinalizerError: If *name* is empty or already registered.
        """
        if not name:
            raise FinalizerError("Finalizer name must not be empty")
        if name in self._factories:
            raise FinalizerError(f"Finalizer '{name}' is already registered")
        self._factories[name] = factory
        logger.info("Registered finalizer '%s'", name)

    def unregister(self, name: str) -> None:
        """Remove *name*. Unknown names are ignored."""
        self._factories.pop(name, None)

    def is_registered(self, name: str) -> bool:
        return name in self._factories

    def names(self) -> list[str]:
        """Registered names, sorted."""
        return sorted(self._factories)

    def resolve(self, name: str) -> Finalizer:
        """Create a fresh finalizer instance for *name*.

        Raises:
            FinalizerError: If *name* is unknown or the factory fails.
        """
        try:
            factory = self._factories[name]
        except KeyError:
            raise FinalizerError(f"Finalizer '{name}' is not registered") from None
        try:
            finalizer = factory()
        except Exception as exc:
            raise FinalizerError(f"Could not create finalizer '{name}': {exc}") from exc
        if not isinstance(finalizer, Finalizer):
            raise FinalizerError(
                f"Factory for '{name}' returned {type(finalizer).__name__}, not a Finalizer"
            )
        return finalizer

    def discover(self) -> list[str]:
        """Register finalizers advertised in the ``restcall.finalizers`` group.

        Entry points that fail to load, or whose name is already
        registered, are logged as warnings and skipped.

        Returns:
            The names that were registered.
        """
        loaded: list[str] = []
        for ep in importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP):
            try:
                self.register(ep.name, ep.load())
                loaded.append(ep.name)
            except Exception as exc:
                logger.warning("Failed to load finalizer '%s': %s", ep.name, exc)
        return loaded


def register_finalizer(
    registry: FinalizerRegistry, name: str
) -> Callable[[type[Finalizer]], type[Finalizer]]:
    """Class decorator registering a :class:`Finalizer` subclass under *name*."""

    def decorator(cls: type[Finalizer]) -> type[Finalizer]:
        registry.register(name, cls)
        return cls

    return decorator
