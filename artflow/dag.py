"""A directed acyclic graph plan: a node runs once all of its parents finished."""

from __future__ import annotations

import json
from typing import Any, Iterable

from .errors import ArtError
from .node import ServiceEntity
from .plan import NextPlan, Plan


class DAGNode:
    """One node of a :class:`DAG`, with its incoming and outgoing edges."""

    def __init__(self, node_name: str) -> None:
        self.node_name = str(node_name)
        self.from_: list[str] = []
        self.to: list[str] = []
        self.service: ServiceEntity | None = None

    def __repr__(self) -> str:
        return f"DAGNode(node_name={self.node_name!r}, from={self.from_!r}, to={self.to!r})"

    @staticmethod
    def from_pair(name: str, service: Any) -> "DAGNode":
        """Build a node named ``name`` that runs the service ``service`` describes."""
        return DAGNode(name).set_service_entity(service)

    def set_from(self, names: Iterable[str]) -> "DAGNode":
        self.from_ = [str(name) for name in names]
        return self

    def add_from(self, name: str) -> None:
        name = str(name)
        if name not in self.from_:
            self.from_.append(name)

    def have_from(self, name: str) -> bool:
        return name in self.from_

    def remove_from_and_take_service(self, name: str) -> ServiceEntity | None:
        """Drop the edge from ``name``; once no parent is left, hand out the service."""
        if name in self.from_:
            self.from_.remove(name)
        if self.from_:
            return None
        service, self.service = self.service, None
        return service

    def set_to(self, names: Iterable[str]) -> "DAGNode":
        self.to = [str(name) for name in names]
        return self

    def add_to(self, name: str) -> None:
        name = str(name)
        if name not in self.to:
            self.to.append(name)

    def have_to(self, name: str) -> bool:
        return name in self.to

    def set_service_entity(self, service: Any) -> "DAGNode":
        entity = ServiceEntity.of(service)
        entity.node_name = self.node_name
        self.service = entity
        return self

    def to_dict(self) -> dict:
        return {"node_name": self.node_name, "from": list(self.from_), "to": list(self.to)}


def _as_dag_node(node: Any) -> DAGNode:
    if isinstance(node, DAGNode):
        return node
    if isinstance(node, tuple) and len(node) == 2:
        return DAGNode.from_pair(*node)
    raise TypeError(f"cannot build a DAGNode from {node!r}")


class DAG(Plan):
    """A plan made of nodes joined by directed edges."""

    def __init__(self) -> None:
        self.start = ""
        self.end = ""
        self.node_set: dict[str, DAGNode] = {}

    def node(self, node: Any) -> "DAG":
        """Add a node, given as a :class:`DAGNode` or a ``(name, service)`` pair."""
        node = _as_dag_node(node)
        self.node_set[node.node_name] = node
        return self

    def nodes(self, nodes: Iterable[Any]) -> "DAG":
        for node in nodes:
            self.node(node)
        return self

    def edge(self, src: str, dst: str) -> "DAG":
        """Join ``src`` to ``dst``; the first source becomes the start, the last target the end."""
        src, dst = str(src), str(dst)
        if not self.start:
            self.start = src
        self.end = dst
        if src in self.node_set:
            self.node_set[src].add_to(dst)
        else:
            self.node_set[src] = DAGNode(src).set_to([dst])
        if dst in self.node_set:
            self.node_set[dst].add_from(src)
        else:
            self.node_set[dst] = DAGNode(dst).set_from([src])
        return self

    def edges(self, pairs: Iterable[tuple[str, str]]) -> "DAG":
        for src, dst in pairs:
            self.edge(src, dst)
        return self

    def set_start_node_name(self, name: str) -> "DAG":
        self.start = str(name)
        return self

    def set_end_node_name(self, name: str) -> "DAG":
        self.end = str(name)
        return self

    def check(self) -> "DAG":
        """Verify the graph is consistent and return it; raise ArtError if not."""
        if self.start not in self.node_set:
            raise ArtError(f"not found start node[{self.start}]")
        if self.end not in self.node_set:
            raise ArtError(f"not found end node[{self.end}]")
        for key, node in self.node_set.items():
            if node.service is None:
                raise ArtError(f"node[{key}].service is empty")
            if node.node_name == self.start:
                if node.from_:
                    raise ArtError("start node.from must is empty")
            else:
                if not node.from_:
                    raise ArtError(f"middle node[{node.node_name}].from must is not empty")
                for parent in node.from_:
                    other = self.node_set.get(parent)
                    if other is None:
                        raise ArtError(f"node[{key}] <- node[{parent}] not found")
                    if not other.have_to(key):
                        raise ArtError(f"node[{key}] <- node[{parent}] edge not found")
            if node.node_name == self.end:
                if node.to:
                    raise ArtError("end node.to must is empty")
            else:
                if not node.to:
                    raise ArtError("start node.to must is not empty")
                for child in node.to:
                    other = self.node_set.get(child)
                    if other is None:
                        raise ArtError(f"node[{key}] -> node[{child}] not found")
                    if not other.have_from(key):
                        raise ArtError(f"node[{key}] -> node[{child}] edge not found")
        return self

    def show_plan(self) -> str:
        doc = {
            "start": self.start,
            "end": self.end,
            "node_set": {name: node.to_dict() for name, node in self.node_set.items()},
        }
        return json.dumps(doc, separators=(",", ":"), ensure_ascii=False)

    def start_node_name(self) -> str:
        return self.start

    def end_node_name(self) -> str:
        return self.end

    def get(self, name: str) -> ServiceEntity | None:
        """Hand out the service entity of ``name``; a second call returns None."""
        node = self.node_set.get(name)
        if node is None:
            return None
        service, node.service = node.service, None
        return service

    def next(self, ctx: Any, name: str) -> NextPlan:
        if name == self.end:
            return NextPlan.end()
        node = self.node_set.get(name)
        if node is None:
            raise ArtError(f"node[{name}] not found")
        targets, node.to = node.to, []
        ready = []
        for target in targets:
            child = self.node_set.get(target)
            if child is None:
                raise ArtError(f"node[{target}] not found")
            service = child.remove_from_and_take_service(name)
            if service is not None:
                ready.append(service)
        return NextPlan.nodes_of(ready)