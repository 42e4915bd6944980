# artflow

artflow runs asynchronous services in the order that a plan gives. The plan
that comes with the package is a `DAG`. The engine starts at the plan's start
node. When a service finishes, its output is stored under the node's name. The
engine then asks the plan which nodes come next and schedules them in the
background on asyncio. A node that several nodes lead into runs once, after all
of them have finished. The run ends when the end node has finished. Its output
value is the result of the run.

The package has no dependencies outside the standard library.

## Installation

```
pip install artflow
```

## Example

```python
import asyncio

from artflow.dag import DAG
from artflow.engine import EngineRT
from artflow.output import Output
from artflow.service import MapServiceLoader


async def service_a(ctx, node):
    return Output("a->success")


async def service_b(ctx, node):
    return Output("b->success")


async def log_middle(ctx, se):
    print("running", se.node_name)
    return await ctx.next(se)


async def show_plan(ctx):
    print("plan ->", ctx.plan.show_plan())


async def main():
    engine = (
        EngineRT()
        .set_service_loader(
            MapServiceLoader()
            .register_service("sa", service_a)
            .register_service("sb", service_b)
        )
        .append_service_middle(log_middle)
        .append_start_callback(show_plan)
        .build()
    )
    plan = DAG().nodes([("a", "sa"), ("b", "sb")]).edge("a", "b").check()
    result = await engine.ctx(plan).run("input")
    print(result)  # b->success


asyncio.run(main())
```

## Modules

- `artflow.service`
  - `Service` is the abstract base class. A service has `async call(ctx, node)`
    and returns an `Output`.
  - `FunctionService` wraps an `async def f(ctx, node)`, and `as_service`
    converts a plain callable to a service. `EmptyService` returns a null
    output.
  - `ServiceLoader` finds a service by name. `MapServiceLoader` is the
    dictionary-backed loader, filled with `register_service(name, service)`.
  - `RuntimePool.push(coro)` starts a background task.
    `AsyncioRuntimePool` does the same and also keeps the tasks that are still
    running in `pending`.
  - `FlowCallback` and `as_callback` cover start and end hooks. A hook may be a
    plain function or a coroutine function.
- `artflow.engine`
  - `EngineRT` is the builder. Its methods are `set_service_loader`,
    `append_service_middle`, `set_runtime_pool`, `append_start_callback`,
    `append_end_callback` and `build`.
  - `base_hook` is always the first middle. It runs the node, stores the
    node's output and schedules the next nodes.
  - `Engine.ctx(plan)` creates a `Ctx`. `Engine.run(ctx, value)` waits for the
    result. `Engine.go(ctx, value)` starts the flow as a task, and any failure
    is recorded on the context.
  - End callbacks run in reverse order of registration. A failure in one of
    them is raised as `EndCallbackError`.
- `artflow.context`
  - `Ctx` holds the engine, the plan, an environment (`CabinetEnv` by
    default) and the shared `Metadata`: input, error, status and the stored
    outputs.
  - Its methods include `next`, `insert_var`, `get_value`, `get_status`,
    `run` and `go`.
  - `CtxStatus` gives the state of a run.
- `artflow.plan`
  - `Plan` is the abstract base class. Its methods are `get`, `next`,
    `start_node_name` (default `"start"`), `end_node_name` (default `"end"`)
    and `show_plan`.
  - `NextPlan` tells the engine whether to run further nodes, to wait, or that
    the flow has ended. `EmptyPlan` has no nodes.
- `artflow.dag`
  - A `DAG` is built from `DAGNode`s, or from `(name, service)` pairs, with
    `node`, `nodes`, `edge` and `edges`.
  - The first edge's source becomes the start node and the last edge's target
    becomes the end node. Both can be overridden with `set_start_node_name`
    and `set_end_node_name`.
  - `check()` validates the graph and raises `ArtError` on the first problem.
  - `show_plan()` returns the graph as compact JSON.
- `artflow.node`
  - `ServiceEntity` is a node as the engine runs it. It holds `service_name`,
    `node_name` and `config`.
  - `ServiceEntity.of` accepts a service name, which is also used as the
    config, or a `(service_name, config)` pair.
  - `config_as` and `take_config` read the config when it has the expected
    type.
- `artflow.output`
  - `Output` wraps a value.
  - `get_val` reads a dotted key through nested dicts and raises `KeyError`
    when the key is missing. `set_value` writes a dotted key.
  - `into(type)` returns the value and raises `TypeError` when the value has
    another type.
  - `json_get` and `json_set` do the same dotted access on plain values.
  - `JsonInput` fills the fields of an input from literal values
    (`add_transform_value`) and from earlier nodes' outputs
    (`add_transform_quote("node.field")`). `skip_null_quote()` skips quotes
    that cannot be found.
- `artflow.json_service`
  - `JsonService(func, input_factory=dict)` is a service whose node config
    must be a `JsonInput`.
  - It builds the input, calls `func(ctx, input, node)` and returns the
    result as JSON. A dataclass result is converted with `asdict`.
- `artflow.errors`
  - `ArtError` is the base class. The other errors are `UnknownError`,
    `EndCallbackError`, `ServiceNotFound`, `NodeEntityNotFound` and
    `NextNodeNull`.
  - `as_art_error` wraps any other exception in an `ArtError`.

## What it does not do

artflow is a library only:

- It has no command-line tool.
- It has no server.
- It does not persist runs. All state lives in memory in the `Ctx` of a run.
- `DAG` is the only plan that comes with the package, and there is no text
  format for writing plans. To get other plans, subclass `Plan`.