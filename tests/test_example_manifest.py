"""
Test the example manifest used by the demos.

Validates that the builder produces the shapes the diagrams are meant to
exercise: out-of-order steps, an external dependency and a dangling rule.
"""

from logicmap.examples import build_example_manifest


def test_example_manifest_structure():
    manifest = build_example_manifest()

    assert manifest.project.id == "shop"
    assert [m.id for m in manifest.modules] == ["order", "payment"]

    order = manifest.get_module("order")
    flow = order.get_flow("f1")
    assert [s.order for s in flow.steps] == [2, 1]

    # Payment depends on a module that is not declared
    payment = manifest.get_module("payment")
    assert manifest.get_module(payment.dependencies[0]) is None

    # Refund step references a rule nobody declares
    assert payment.flows[0].steps[0].rules == ["R9"]

    sm = order.get_state_machine("order_status")
    assert [s.id for s in sm.states if s.is_final] == ["cancelled", "done"]


def test_example_manifest_fresh_each_call():
    a = build_example_manifest()
    b = build_example_manifest()
    a.modules.clear()
    assert len(b.modules) == 2
