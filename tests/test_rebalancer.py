from unittest.mock import MagicMock

import pytest

from vcpu_balancer.core.errors import PinningError
from vcpu_balancer.lib.rebalance import rebalancer
from vcpu_balancer.lib.rebalance.rebalancer import apply_assignments, plan_assignments

from conftest import FakeDomain, make_session


def test_plan_descending_round_robin():
    plan = plan_assignments([("A", 30), ("B", 90), ("C", 10)], 2)
    assert plan == [("B", 0), ("A", 1), ("C", 0)]


def test_plan_is_idempotent():
    totals = [("A", 30), ("B", 90), ("C", 10)]
    assert plan_assignments(totals, 2) == plan_assignments(totals, 2)
    ranked = [("B", 90), ("A", 30), ("C", 10)]
    assert plan_assignments(ranked, 2) == plan_assignments(ranked, 2)


def test_plan_ties_keep_enumeration_order():
    plan = plan_assignments([("A", 5), ("B", 5), ("C", 5)], 4)
    assert plan == [("A", 0), ("B", 1), ("C", 2)]


def test_plan_rejects_no_cores():
    with pytest.raises(ValueError):
        plan_assignments([("A", 1)], 0)


def test_plan_empty():
    assert plan_assignments([], 4) == []


def test_apply_pins_single_core():
    a = FakeDomain("A", cpumap=(True, True))
    b = FakeDomain("B", cpumap=(True, True))
    session = make_session([a, b], cpus=2)
    before = rebalancer.pin_changes_total
    apply_assignments(session, session.samples, [("B", 0), ("A", 1)])
    assert b.pins == [(0, (True, False))]
    assert a.pins == [(0, (False, True))]
    assert rebalancer.pin_changes_total == before + 2


def test_apply_failure_is_fatal_and_not_rolled_back():
    a = FakeDomain("A")
    b = FakeDomain("B", pin_error=RuntimeError("refused"))
    c = FakeDomain("C")
    session = make_session([a, b, c], cpus=2)
    with pytest.raises(PinningError):
        apply_assignments(session, session.samples, [("A", 0), ("B", 1), ("C", 0)])
    assert len(a.pins) == 1
    assert c.pins == []


def test_dry_run_does_not_pin():
    session = MagicMock()
    sample = MagicMock()
    sample.name = "A"
    apply_assignments(session, [sample], [("A", 0)], dry_run=True)
    session.set_vcpu_pinning.assert_not_called()
