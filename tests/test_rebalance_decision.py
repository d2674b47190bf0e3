from vcpu_balancer.core.config_loader import build_config
from vcpu_balancer.core.state import HostState
from vcpu_balancer.lib.rebalance.rebalance_decision import (
    BALANCED,
    IMBALANCED,
    NOT_APPLICABLE,
    OVERRIDE_TRIGGERED,
    evaluate,
)


def host_with(usage, counter=0, override=False):
    host = HostState(len(usage))
    host.cpu_usage = list(usage)
    host.consecutive_imbalanced_cycles = counter
    host.override = override
    return host


def test_even_load_is_balanced_and_resets_counter(config):
    host = host_with([10, 10, 10], counter=2)
    decision = evaluate(host, config)
    assert decision.verdict == BALANCED
    assert decision.label == "YES"
    assert not decision.rebalance
    assert host.consecutive_imbalanced_cycles == 0


def test_imbalance_must_persist_three_cycles(config):
    host = host_with([10, 1, 10])
    verdicts = []
    counters = []
    for _ in range(3):
        verdicts.append(evaluate(host, config).verdict)
        counters.append(host.consecutive_imbalanced_cycles)
    assert verdicts == [BALANCED, BALANCED, IMBALANCED]
    assert counters == [1, 2, 0]


def test_tolerated_imbalance_is_labelled_no(config):
    decision = evaluate(host_with([10, 1, 10]), config)
    assert decision.verdict == BALANCED
    assert decision.label == "NO"
    assert not decision.rebalance


def test_balanced_cycle_interrupts_streak(config):
    host = host_with([10, 1, 10])
    evaluate(host, config)
    evaluate(host, config)
    host.cpu_usage = [10, 10, 10]
    evaluate(host, config)
    host.cpu_usage = [10, 1, 10]
    assert evaluate(host, config).verdict == BALANCED
    assert host.consecutive_imbalanced_cycles == 1


def test_override_wins_regardless_of_usage(config):
    for usage in ([10, 10, 10], [10, 1, 10], [0, 0, 0], [1, 0, 0]):
        host = host_with(usage, counter=2, override=True)
        decision = evaluate(host, config)
        assert decision.verdict == OVERRIDE_TRIGGERED
        assert decision.rebalance
        assert host.override is False
        assert host.consecutive_imbalanced_cycles == 0


def test_below_noise_floor_is_not_applicable(config):
    host = host_with([2.0, 0.1], counter=2)
    decision = evaluate(host, config)
    assert decision.verdict == NOT_APPLICABLE
    assert decision.label == "N/A"
    assert host.consecutive_imbalanced_cycles == 0


def test_idle_host_is_balanced(config):
    decision = evaluate(host_with([0.0, 0.0]), config)
    assert decision.verdict == BALANCED
    assert decision.max_usage == 0.0


def test_custom_hysteresis():
    config = build_config({"default": {"hysteresis_cycles": 1}})
    assert evaluate(host_with([10, 1]), config).verdict == IMBALANCED
