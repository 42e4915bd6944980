import asyncio
from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest

from artflow.context import CabinetEnv, Ctx, CtxStatus, Metadata
from artflow.errors import ArtError, NextNodeNull, ServiceNotFound
from artflow.node import ServiceEntity
from artflow.output import JsonInput, Output
from artflow.plan import EmptyPlan, Plan
from artflow.service import FunctionService


class _Rt:
    def __init__(self, middles=()):
        self.entity = SimpleNamespace(service_middles=list(middles))
        self.started = []

    def go(self, ctx, value):
        self.started.append((ctx, value))

    async def run(self, ctx, value):
        return ("ran", value)


def _ctx(middles=()):
    return Ctx(_Rt(middles), EmptyPlan())


@pytest.mark.asyncio
async def test_next_runs_middles_then_service():
    calls = []

    async def middle(ctx, se):
        calls.append(("middle", se.middle_index))
        return await ctx.next(se)

    async def service(ctx, se):
        calls.append(("service", se.middle_index))
        return Output("done")

    ctx = _ctx([FunctionService(middle)])
    se = ServiceEntity.of("svc").with_service(FunctionService(service))
    out = await ctx.next(se)
    assert out.value == "done"
    assert calls == [("middle", 1), ("service", 1)]


@pytest.mark.asyncio
async def test_next_past_end_raises():
    ctx = _ctx()
    se = ServiceEntity.of("svc")
    se.middle_index = 1
    with pytest.raises(NextNodeNull):
        await ctx.next(se)


@pytest.mark.asyncio
async def test_insert_var_and_get_value():
    ctx = _ctx()
    await ctx.insert_var("n", {"a": {"b": [1, 2]}})
    assert await ctx.get_value("n", "a.b") == [1, 2]
    await ctx.insert_var("o", Output({"k": "v"}))
    assert await ctx.get_value("o", "k") == "v"


@pytest.mark.asyncio
async def test_get_value_missing():
    ctx = _ctx()
    await ctx.insert_var("n", {"a": 1})
    with pytest.raises(KeyError):
        await ctx.get_value("n", "b")
    with pytest.raises(KeyError):
        await ctx.get_value("other", "a")


def test_input_round_trip():
    ctx = _ctx()
    assert ctx.insert_input("hello world") is ctx
    assert ctx.rem_input() == "hello world"
    assert ctx.rem_input() is None


def test_insert_error_wraps_foreign_errors():
    ctx = _ctx()
    cause = ValueError("bad")
    ctx.insert_error(cause)
    err = ctx.rem_error()
    assert isinstance(err, ArtError)
    assert err.__cause__ is cause
    assert ctx.rem_error() is None


def test_insert_error_keeps_art_errors():
    ctx = _ctx()
    err = ServiceNotFound("x")
    ctx.insert_error(err)
    assert ctx.rem_error() is err


@pytest.mark.asyncio
async def test_set_any_error_wakes():
    ctx = _ctx()
    event = asyncio.Event()
    ctx.metadata.waker = event
    await ctx.set_any_error(RuntimeError("boom"))
    assert ctx.get_status() is CtxStatus.ERROR
    assert event.is_set()
    assert ctx.metadata.waker is None
    assert str(ctx.rem_error()) == "boom"


@pytest.mark.asyncio
async def test_success_wakes():
    ctx = _ctx()
    assert ctx.get_status() is CtxStatus.INIT
    event = asyncio.Event()
    ctx.metadata.waker = event
    await ctx.success()
    assert ctx.get_status() is CtxStatus.SUCCESS
    assert event.is_set()


@pytest.mark.asyncio
async def test_status_display():
    ctx = _ctx()
    assert str(ctx.get_status()) == "CtxStatus::New"
    await ctx.success()
    assert str(ctx.get_status()) == "CtxStatus::SUCCESS"


class _OnePlan(Plan):
    def get(self, name):
        return None

    def next(self, ctx, name):
        raise LookupError(name)


@pytest.mark.asyncio
async def test_clone_no_plan_shares_metadata():
    ctx = Ctx(_Rt(), _OnePlan())
    clone = ctx.clone_no_plan()
    assert isinstance(ctx.plan, _OnePlan)
    assert isinstance(clone.plan, EmptyPlan)
    assert clone.metadata is ctx.metadata
    await clone.insert_var("n", {"a": 1})
    assert await ctx.get_value("n", "a") == 1
    with pytest.raises(ArtError):
        clone.plan.next(clone, "a")


def test_none_plan_becomes_empty():
    ctx = Ctx(_Rt(), None)
    assert isinstance(ctx.plan, EmptyPlan)
    assert isinstance(ctx.metadata, Metadata)
    assert ctx.metadata.vars == {}


def test_env_set_and_get():
    ctx = _ctx()
    env = CabinetEnv()
    assert ctx.set_env(env) is ctx
    assert ctx.get_env() is env


@pytest.mark.asyncio
async def test_cabinet_env_round_trip():
    env = CabinetEnv()
    await env.feedback("hello")
    await env.feedback(42)
    assert await env.watch(str) == "hello"
    assert await env.watch(str) is None
    assert await env.watch(int) == 42


@pytest.mark.asyncio
async def test_go_and_run_delegate_to_engine():
    rt = _Rt()
    ctx = Ctx(rt, EmptyPlan())
    ctx.go("x")
    assert rt.started == [(ctx, "x")]
    assert await ctx.run("y") == ("ran", "y")


@dataclass
class SampleJson:
    name: str = ""
    code: int = 0
    list: list = field(default_factory=list)


@pytest.mark.asyncio
async def test_json_input_reads_context_vars():
    ctx = _ctx()
    await ctx.insert_var(
        "test_node",
        {"code": 1, "message": "success", "data": {"list": [1, 2, 3]}},
    )
    ji = (
        JsonInput()
        .skip_null_quote()
        .add_transform_value("name", "helloworld")
        .add_transform_quote("message", "test_node.message")
        .add_transform_quote("code", "test_node.code_v2")
        .add_transform_quote("list", "test_node.data.list")
    )
    t = await ji.default_transform(ctx, SampleJson)
    assert t.code == 0
    assert t.name == "helloworld"
    assert t.list[0] == 1
    assert t.list[2] == 3