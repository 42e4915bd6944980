"""Values produced by services, and rules that build service input from them."""

from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable


def json_get(value: Any, key: str) -> Any:
    """Look up a dotted ``key`` inside nested dicts; raise KeyError if absent."""
    current = value
    path = key
    while True:
        head, sep, rest = path.partition(".")
        if not isinstance(current, dict) or head not in current:
            raise KeyError(key)
        current = current[head]
        if not sep:
            return current
        path = rest


def json_set(value: Any, key: str, val: Any) -> dict:
    """Set a dotted ``key`` to ``val`` and return the resulting root object.

    Anything that is not a dict on the way is replaced by an empty dict.
    """
    root = value if isinstance(value, dict) else {}
    head, sep, rest = key.partition(".")
    if sep:
        root[head] = json_set(root.get(head), rest, val)
    else:
        root[head] = val
    return root


@dataclass
class Output:
    """The result of one service call."""

    value: Any = None

    def type_name(self) -> str:
        return type(self.value).__name__

    def into(self, expected_type: type) -> Any:
        """Return the held value, checking that it is an ``expected_type``."""
        if isinstance(self.value, expected_type):
            return self.value
        raise TypeError(
            f"expect type[{expected_type.__name__}] found type[{self.type_name()}]"
        )

    def get_val(self, key: str) -> Any:
        return json_get(self.value, key)

    def set_value(self, key: str, val: Any) -> None:
        self.value = json_set(self.value, key, val)


@dataclass(frozen=True)
class Tran:
    """One source for an input field: a literal value or a quoted node field."""

    data: Any
    is_quote: bool = False

    @staticmethod
    def value(val: Any) -> "Tran":
        return Tran(val)

    @staticmethod
    def quote(quote: str) -> "Tran":
        return Tran(str(quote), True)


def _to_document(val: Any) -> tuple[Any, Callable[[Any], Any]]:
    if dataclasses.is_dataclass(val) and not isinstance(val, type):
        cls = type(val)
        names = [f.name for f in dataclasses.fields(cls) if f.init]

        def rebuild(doc: dict) -> Any:
            return cls(**{name: doc[name] for name in names if name in doc})

        return dataclasses.asdict(val), rebuild
    return copy.deepcopy(val), lambda doc: doc


def _insert(target: Any, position: str, val: Any) -> None:
    if not isinstance(target, dict):
        head = position.split(".", 1)[0]
        raise ValueError(f"JsonInput.to not found object field[{head}]")
    # Every segment of a dotted position addresses the same top-level object,
    # so the value lands under the last segment.
    target[position.rsplit(".", 1)[-1]] = val


@dataclass
class JsonInput:
    """Rules that fill the fields of a service's input document."""

    none_quote_skip: bool = False
    transform_rule: list[tuple[str, Tran]] = field(default_factory=list)

    def skip_null_quote(self) -> "JsonInput":
        """Skip quoted fields that cannot be found instead of failing."""
        self.none_quote_skip = True
        return self

    def add_transform_rule(self, position: str, transform: Any) -> "JsonInput":
        tran = transform if isinstance(transform, Tran) else Tran.value(transform)
        self.transform_rule.append((str(position), tran))
        return self

    def add_transform_rules(self, rules: Iterable[tuple[str, Any]]) -> "JsonInput":
        for position, transform in rules:
            self.add_transform_rule(position, transform)
        return self

    def add_transform_value(self, position: str, value: Any) -> "JsonInput":
        return self.add_transform_rule(position, Tran.value(value))

    def add_transform_quote(self, position: str, quote: str) -> "JsonInput":
        return self.add_transform_rule(position, Tran.quote(quote))

    async def transform(self, ctx: Any, val: Any) -> Any:
        """Apply every rule to ``val`` and return the result.

        ``val`` is a JSON-like value or a dataclass instance; quoted rules
        read ``node.field`` from the outputs stored in ``ctx``.
        """
        doc, rebuild = _to_document(val)
        for position, tran in self.transform_rule:
            if tran.is_quote:
                node, _, key = tran.data.partition(".")
                try:
                    new_value = await ctx.get_value(node, key)
                except KeyError:
                    if self.none_quote_skip:
                        continue
                    raise LookupError(
                        f"JsonInput.to not found node.field[{tran.data}] from metadata"
                    ) from None
            else:
                new_value = copy.deepcopy(tran.data)
            _insert(doc, position, new_value)
        return rebuild(doc)

    async def default_transform(self, ctx: Any, factory: Callable[[], Any]) -> Any:
        """Apply the rules to a fresh value made by ``factory``."""
        return await self.transform(ctx, factory())