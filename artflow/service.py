"""Services, service loaders, background pools and flow callbacks."""

from __future__ import annotations

import asyncio
import inspect
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Coroutine

from .output import Output

if TYPE_CHECKING:
    from .node import ServiceEntity


class Service(ABC):
    """One unit of work that a node runs."""

    @abstractmethod
    async def call(self, ctx: Any, node: "ServiceEntity") -> Output:
        """Run the service for ``node`` and return its output."""


class EmptyService(Service):
    """A service that does nothing and returns a null output."""

    async def call(self, ctx: Any, node: "ServiceEntity") -> Output:
        return Output()


class FunctionService(Service):
    """A service backed by an async function ``func(ctx, node)``."""

    def __init__(self, func: Callable[[Any, "ServiceEntity"], Awaitable[Output]]) -> None:
        self.func = func

    async def call(self, ctx: Any, node: "ServiceEntity") -> Output:
        return await self.func(ctx, node)


def as_service(obj: Any) -> Service:
    """Return ``obj`` as a service, wrapping plain callables."""
    if isinstance(obj, Service):
        return obj
    if callable(obj):
        return FunctionService(obj)
    raise TypeError(f"{obj!r} is not a service")


class ServiceLoader(ABC):
    """Finds services by name."""

    @abstractmethod
    async def load(self, name: str) -> Service | None:
        """Return the service registered as ``name``, or None."""


class MapServiceLoader(ServiceLoader):
    """A loader backed by a dict of registered services."""

    def __init__(self) -> None:
        self.services: dict[str, Service] = {}

    def register_service(self, name: str, service: Any) -> "MapServiceLoader":
        self.services[str(name)] = as_service(service)
        return self

    async def load(self, name: str) -> Service | None:
        return self.services.get(name)


_BACKGROUND: set[asyncio.Task] = set()


class RuntimePool:
    """Runs flow work in the background without waiting for it."""

    async def push(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        _BACKGROUND.add(task)
        task.add_done_callback(_BACKGROUND.discard)
        return task


class AsyncioRuntimePool(RuntimePool):
    """A pool that keeps track of the tasks it still runs."""

    def __init__(self) -> None:
        self.pending: set[asyncio.Task] = set()

    async def push(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = await super().push(coro)
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)
        return task


class FlowCallback(ABC):
    """A hook run when a flow starts or ends."""

    @abstractmethod
    async def call(self, ctx: Any) -> None:
        """Run the hook for the flow of ``ctx``."""


class _FunctionCallback(FlowCallback):
    def __init__(self, func: Callable[[Any], Awaitable[None]]) -> None:
        self.func = func

    async def call(self, ctx: Any) -> None:
        result = self.func(ctx)
        if inspect.isawaitable(result):
            await result


def as_callback(obj: Any) -> FlowCallback:
    """Return ``obj`` as a flow callback, wrapping plain callables."""
    if isinstance(obj, FlowCallback):
        return obj
    if callable(obj):
        return _FunctionCallback(obj)
    raise TypeError(f"{obj!r} is not a flow callback")