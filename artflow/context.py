"""The per-flow context: shared state, plan and environment of one run."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import ArtError, NextNodeNull, as_art_error
from .output import Output
from .plan import EmptyPlan, Plan

if TYPE_CHECKING:
    from .node import ServiceEntity


class CtxStatus(Enum):
    """Where a flow run stands."""

    INIT = "New"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    ERROR = "Error"
    OVER = "Over"

    def __str__(self) -> str:
        return f"CtxStatus::{self.value}"


@dataclass
class Metadata:
    """State shared by every clone of one context."""

    input: Any = None
    error: ArtError | None = None
    status: CtxStatus = CtxStatus.INIT
    waker: asyncio.Event | None = None
    vars: dict[str, Output] = field(default_factory=dict)

    def wake(self) -> None:
        waker, self.waker = self.waker, None
        if waker is not None:
            waker.set()


class CabinetEnv:
    """An environment that keeps one value per type until it is watched."""

    def __init__(self) -> None:
        self.cabinet: dict[type, Any] = {}

    async def watch(self, type_: type) -> Any:
        """Remove and return the stored value of ``type_``, or None."""
        return self.cabinet.pop(type_, None)

    async def feedback(self, info: Any) -> None:
        self.cabinet[type(info)] = info


class Ctx:
    """A flow run: the engine, the plan, the environment and shared metadata."""

    def __init__(self, rt: Any, plan: Plan | None) -> None:
        self.rt = rt
        self.plan: Plan = plan if plan is not None else EmptyPlan()
        self.env: Any = CabinetEnv()
        self.metadata = Metadata()

    async def next(self, se: "ServiceEntity") -> Output:
        """Pass ``se`` to the next middle in the chain, or to its service."""
        middles = self.rt.entity.service_middles
        if se.middle_index < len(middles):
            middle = middles[se.middle_index]
            se.middle_index += 1
            return await middle.call(self, se)
        if se.middle_index == len(middles):
            return await se.service.call(self, se)
        raise NextNodeNull()

    async def insert_var(self, node: str, value: Any) -> None:
        output = value if isinstance(value, Output) else Output(value)
        self.metadata.vars[str(node)] = output

    async def get_value(self, node: str, field: str) -> Any:
        """Return ``field`` of the output of ``node``; raise KeyError if absent."""
        output = self.metadata.vars.get(node)
        if output is None:
            raise KeyError(node)
        return output.get_val(field)

    def insert_input(self, value: Any) -> "Ctx":
        self.metadata.input = value
        return self

    def rem_input(self) -> Any:
        value, self.metadata.input = self.metadata.input, None
        return value

    def insert_error(self, err: BaseException) -> None:
        self.metadata.error = as_art_error(err)

    def rem_error(self) -> ArtError | None:
        err, self.metadata.error = self.metadata.error, None
        return err

    async def set_any_error(self, err: BaseException) -> None:
        """Record ``err``, mark the run failed and wake whoever waits for it."""
        self.metadata.error = as_art_error(err)
        self.metadata.status = CtxStatus.ERROR
        self.metadata.wake()

    async def success(self) -> None:
        """Mark the run finished and wake whoever waits for it."""
        self.metadata.status = CtxStatus.SUCCESS
        self.metadata.wake()

    def get_status(self) -> CtxStatus:
        return self.metadata.status

    def clone_no_plan(self) -> "Ctx":
        """Return a context sharing this one's state but holding an empty plan."""
        clone = copy.copy(self)
        clone.plan = EmptyPlan()
        return clone

    def set_env(self, env: Any) -> "Ctx":
        self.env = env
        return self

    def get_env(self) -> Any:
        return self.env

    def go(self, value: Any) -> None:
        """Start the flow with ``value`` in the background."""
        self.rt.go(self, value)

    async def run(self, value: Any) -> Any:
        """Run the flow with ``value`` and return the end node's output."""
        return await self.rt.run(self, value)