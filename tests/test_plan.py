import pytest

from artflow.errors import ArtError
from artflow.node import ServiceEntity
from artflow.plan import EmptyPlan, NextPlan, NextPlanKind, Plan


def test_next_plan_constructors():
    nodes = [ServiceEntity.of("a"), ServiceEntity.of("b")]
    plan = NextPlan.nodes_of(iter(nodes))
    assert plan.kind is NextPlanKind.NODES
    assert plan.nodes == nodes
    assert NextPlan.end().kind is NextPlanKind.END
    assert NextPlan.end().nodes == []
    assert NextPlan.wait().kind is NextPlanKind.WAIT


def test_empty_plan_defaults():
    plan = EmptyPlan()
    assert plan.start_node_name() == "start"
    assert plan.end_node_name() == "end"
    assert plan.show_plan() == ""


def test_empty_plan_get_returns_none():
    assert EmptyPlan().get("start") is None


def test_empty_plan_next_fails():
    with pytest.raises(ArtError, match="this is empty plan!!!"):
        EmptyPlan().next(None, "start")


def test_plan_is_abstract():
    with pytest.raises(TypeError):
        Plan()


class _Single(Plan):
    def __init__(self, entity):
        self.entity = entity

    def get(self, name):
        return self.entity if name == self.start_node_name() else None

    def next(self, ctx, name):
        return NextPlan.end()


def test_subclass_uses_its_own_rules():
    entity = ServiceEntity.of("only")
    plan = _Single(entity)
    assert Plan.start_node_name(plan) == "start"
    assert Plan.end_node_name(plan) == "end"
    assert Plan.show_plan(plan) == ""
    assert plan.get("start").service_name == "only"
    assert plan.get("other") is None
    assert plan.next(None, "start").kind is NextPlanKind.END