"""Services whose input is built from JSON rules and whose output is JSON."""

from __future__ import annotations

import dataclasses
import inspect
import json
from typing import TYPE_CHECKING, Any, Callable

from .errors import ArtError
from .output import JsonInput, Output
from .service import Service

if TYPE_CHECKING:
    from .node import ServiceEntity


class JsonService(Service):
    """Wraps ``func(ctx, input, node)``; the node's config must be a JsonInput."""

    def __init__(self, func: Callable[..., Any], input_factory: Callable[[], Any] = dict) -> None:
        self.func = func
        self.input_factory = input_factory

    async def input(self, ctx: Any, node: "ServiceEntity") -> Any:
        """Take the node's JsonInput config and build the input value from it."""
        rules = node.take_config(JsonInput)
        if rules is None:
            raise ArtError(
                f"JsonServiceExt:{node.service_name}.{node.node_name} "
                "ServiceEntity config must json Value"
            )
        return await rules.default_transform(ctx, self.input_factory)

    async def output(self, out: Any) -> Output:
        """Turn ``out`` into a JSON output."""
        try:
            if dataclasses.is_dataclass(out) and not isinstance(out, type):
                out = dataclasses.asdict(out)
            value = json.loads(json.dumps(out))
        except (TypeError, ValueError) as err:
            raise ArtError(f"JsonServiceExt:output failed:{err}") from err
        return Output(value)

    async def call(self, ctx: Any, node: "ServiceEntity") -> Output:
        value = await self.input(ctx, node)
        result = self.func(ctx, value, node)
        if inspect.isawaitable(result):
            result = await result
        return await self.output(result)