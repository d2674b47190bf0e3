from vcpu_balancer.lib.usage.usage_math import (
    calculate_mean,
    calculate_stddev,
    check_max_criteria,
    only_one_bit_set,
    return_max,
)


def test_return_max():
    assert return_max([1.0, 7.5, 3.0]) == 7.5
    assert return_max([]) == 0.0
    assert return_max([0.0, 0.0]) == 0.0


def test_check_max_criteria_balanced():
    assert check_max_criteria([10, 10, 10], 10)
    assert check_max_criteria([10, 5, 10], 10)  # exactly half is allowed


def test_check_max_criteria_imbalanced():
    assert not check_max_criteria([10, 1, 10], 10)
    assert not check_max_criteria([10, 4.99], 10)


def test_check_max_criteria_custom_ratio():
    assert check_max_criteria([9, 3], 9, ratio=3.0)
    assert not check_max_criteria([9, 2], 9, ratio=3.0)


def test_only_one_bit_set():
    assert not only_one_bit_set(0)
    assert only_one_bit_set(1)
    assert only_one_bit_set(2)
    assert only_one_bit_set(0x80)
    assert not only_one_bit_set(3)
    assert not only_one_bit_set(0xFF)
    assert not only_one_bit_set((1 << 64) - 1)


def test_mean_and_stddev():
    values = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
    assert calculate_mean(values) == 5.0
    assert calculate_stddev(values) == 2.0
    assert calculate_mean([]) == 0.0
    assert calculate_stddev([]) == 0.0
