"""The plan interface: which nodes run after which."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable

from .errors import ArtError

if TYPE_CHECKING:
    from .node import ServiceEntity


class NextPlanKind(Enum):
    NODES = "nodes"
    END = "end"
    WAIT = "wait"


@dataclass
class NextPlan:
    """What a plan says should happen after a node finished."""

    kind: NextPlanKind
    nodes: list = field(default_factory=list)

    @staticmethod
    def nodes_of(nodes: Iterable["ServiceEntity"]) -> "NextPlan":
        return NextPlan(NextPlanKind.NODES, list(nodes))

    @staticmethod
    def end() -> "NextPlan":
        return NextPlan(NextPlanKind.END)

    @staticmethod
    def wait() -> "NextPlan":
        return NextPlan(NextPlanKind.WAIT)


class Plan(ABC):
    """Decides the order in which a flow's nodes run."""

    def show_plan(self) -> str:
        return ""

    def start_node_name(self) -> str:
        return "start"

    def end_node_name(self) -> str:
        return "end"

    @abstractmethod
    def get(self, name: str) -> "ServiceEntity | None":
        """Return the service entity of node ``name``, or None."""

    @abstractmethod
    def next(self, ctx: Any, name: str) -> NextPlan:
        """Report what runs after node ``name`` finished."""


class EmptyPlan(Plan):
    """A plan with no nodes."""

    def get(self, name: str) -> "ServiceEntity | None":
        return None

    def next(self, ctx: Any, name: str) -> NextPlan:
        raise ArtError("this is empty plan!!!")