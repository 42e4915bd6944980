"""The flow engine: runs a plan's services through the middle chain."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from .context import Ctx, CtxStatus
from .errors import ArtError, EndCallbackError, NodeEntityNotFound, ServiceNotFound, UnknownError
from .output import Output
from .plan import NextPlanKind, Plan
from .service import (
    FlowCallback,
    MapServiceLoader,
    RuntimePool,
    Service,
    ServiceLoader,
    as_callback,
    as_service,
)

if TYPE_CHECKING:
    from .node import ServiceEntity


_RUNNING_FLOWS: set[asyncio.Task] = set()


async def base_hook(ctx: Ctx, se: "ServiceEntity") -> Output:
    """Run a node, store its output and start the nodes the plan says come next."""
    node = se.node_name
    rt = ctx.rt
    out = await ctx.next(se)
    await ctx.insert_var(node, out)

    next_plan = ctx.plan.next(ctx.clone_no_plan(), node)
    if next_plan.kind is NextPlanKind.END:
        await ctx.success()
        return Output()
    if next_plan.kind is NextPlanKind.WAIT:
        return Output()
    for entity in next_plan.nodes:
        service = await rt.load_service(entity.service_name)
        if service is None:
            raise ServiceNotFound(entity.service_name)
        entity.with_service(service)
        await rt.call_service(ctx, entity)
    return Output()


class EngineRT:
    """The engine's configuration: loader, middles, pool and flow callbacks."""

    def __init__(self) -> None:
        self.service_loader: ServiceLoader = MapServiceLoader()
        self.service_middles: list[Service] = []
        self.runtime_pool: RuntimePool = RuntimePool()
        self.flow_start_callback: list[FlowCallback] = []
        self.flow_end_callback: list[FlowCallback] = []
        self.append_service_middle(base_hook)

    def set_service_loader(self, loader: ServiceLoader) -> "EngineRT":
        self.service_loader = loader
        return self

    def append_service_middle(self, middle: Any) -> "EngineRT":
        """Add a middle ``middle(ctx, se)`` that usually ends with ``ctx.next(se)``."""
        self.service_middles.append(as_service(middle))
        return self

    def set_runtime_pool(self, pool: RuntimePool) -> "EngineRT":
        self.runtime_pool = pool
        return self

    def append_start_callback(self, callback: Any) -> "EngineRT":
        self.flow_start_callback.append(as_callback(callback))
        return self

    def append_end_callback(self, callback: Any) -> "EngineRT":
        self.flow_end_callback.append(as_callback(callback))
        return self

    def build(self) -> "Engine":
        return Engine(self)


class Engine:
    """Starts flows and waits for their results."""

    def __init__(self, entity: EngineRT) -> None:
        self.entity = entity

    def ctx(self, plan: Plan) -> Ctx:
        return Ctx(self, plan)

    async def load_service(self, name: str) -> Service | None:
        return await self.entity.service_loader.load(name)

    async def _ignore_err(self, ctx: Ctx, se: "ServiceEntity") -> None:
        try:
            await ctx.next(se)
        except Exception as err:  # noqa: BLE001 - recorded on the context
            await ctx.set_any_error(err)

    async def call_service(self, ctx: Ctx, se: "ServiceEntity") -> None:
        """Run ``se`` in the background; a failure is recorded on ``ctx``."""
        await self.entity.runtime_pool.push(self._ignore_err(ctx, se))

    async def _wait(self, ctx: Ctx) -> None:
        meta = ctx.metadata
        if meta.status is CtxStatus.INIT:
            event = asyncio.Event()
            meta.waker = event
            meta.status = CtxStatus.RUNNING
            await event.wait()
        status = meta.status
        if status in (CtxStatus.SUCCESS, CtxStatus.ERROR):
            return
        if status is CtxStatus.RUNNING:
            raise ArtError("WaitCallback.status[RUNNING]: Abnormal wake up")
        raise ArtError("WaitCallback.status[Over]: Abnormal wake up")

    async def _raw_run(self, ctx: Ctx, value: Any) -> None:
        ctx.insert_input(value)
        start = ctx.plan.start_node_name()
        se = ctx.plan.get(start)
        if se is None:
            raise NodeEntityNotFound(start)
        for callback in self.entity.flow_start_callback:
            await callback.call(ctx)
        service = await self.load_service(se.service_name)
        if service is None:
            raise ServiceNotFound(se.service_name)
        se.with_service(service)

        async def start_first() -> None:
            await asyncio.sleep(0)
            await self.call_service(ctx, se)

        await self.entity.runtime_pool.push(start_first())
        await self._wait(ctx)
        for callback in reversed(self.entity.flow_end_callback):
            try:
                await callback.call(ctx)
            except Exception as err:
                raise EndCallbackError(err) from err

    def go(self, ctx: Ctx, value: Any) -> asyncio.Task:
        """Start the flow in the background; a failure is recorded on ``ctx``."""

        async def runner() -> None:
            try:
                await self._raw_run(ctx, value)
            except Exception as err:  # noqa: BLE001 - recorded on the context
                await ctx.set_any_error(err)

        task = asyncio.get_running_loop().create_task(runner())
        _RUNNING_FLOWS.add(task)
        task.add_done_callback(_RUNNING_FLOWS.discard)
        return task

    async def run(self, ctx: Ctx, value: Any) -> Any:
        """Run the flow and return the value the end node produced."""
        await self._raw_run(ctx, value)
        if ctx.get_status() is CtxStatus.SUCCESS:
            end = ctx.plan.end_node_name()
            out = ctx.metadata.vars.pop(end, None)
            if out is None:
                raise ArtError("not found result")
            return out.value
        err = ctx.rem_error()
        if err is not None:
            raise err
        raise UnknownError("not found error")