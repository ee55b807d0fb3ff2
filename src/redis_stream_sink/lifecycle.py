"""
Component lifecycle: capability protocols and a managed handle.

The lifecycle manager calls ``initialize(context)`` once before first use and
``dispose()`` once at shutdown. ``Lifecycle`` wraps a component so both calls
are safe to make whether or not the component implements them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from loguru import logger

from .metrics import MetricsRecorder, PrometheusMetrics

T = TypeVar("T")


@runtime_checkable
class Initializable(Protocol):
    async def initialize(self, context: "ComponentContext") -> None: ...


@runtime_checkable
class Disposable(Protocol):
    async def dispose(self) -> None: ...


@dataclass
class ComponentContext:
    """What a component receives at initialization."""

    metrics: MetricsRecorder = field(default_factory=PrometheusMetrics)
    name: str = "component"


class Lifecycle(Generic[T]):
    """Owned handle around a component with idempotent init/dispose.

    Attribute access is forwarded to the wrapped component, so the handle can
    be used in its place.
    """

    def __init__(self, component: T):
        self._component = component
        self._initialized = False
        self._disposed = False

    @property
    def component(self) -> T:
        return self._component

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self, context: ComponentContext) -> None:
        if self._initialized:
            return
        if isinstance(self._component, Initializable):
            await self._component.initialize(context)
        self._initialized = True
        logger.debug(f"Initialized {type(self._component).__name__} ({context.name})")

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        if isinstance(self._component, Disposable):
            await self._component.dispose()
        logger.debug(f"Disposed {type(self._component).__name__}")

    def __getattr__(self, name: str) -> Any:
        # only reached for attributes missing on the handle itself
        if name == "_component":
            raise AttributeError(name)
        return getattr(self._component, name)


def make_lifecycle(component: T) -> Lifecycle[T]:
    if isinstance(component, Lifecycle):
        return component
    return Lifecycle(component)
