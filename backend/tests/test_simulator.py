"""Tests for netflow.polling.simulator."""
import random
import re

import pytest

from netflow.config import LinkThresholds
from netflow.models.device import DeviceStatus
from netflow.models.link import LinkStatus
from netflow.polling.simulator import (
    address_seed,
    baseline_load,
    link_health,
    random_status,
    simulate_sample,
)


class TestAddressSeed:
    def test_trailing_octet(self):
        assert address_seed("10.0.0.9") == 9
        assert address_seed("192.168.1.254") == 254

    def test_non_numeric_tail_defaults_to_one(self):
        assert address_seed("core-router.local") == 1
        assert address_seed("") == 1

    def test_single_segment(self):
        assert address_seed("42") == 42


class TestBaselineLoad:
    def test_known_values(self):
        assert baseline_load(9) == 3  # 63 % 60
        assert baseline_load(1) == 7
        assert baseline_load(10) == 10

    def test_deterministic_for_same_seed(self):
        seed = address_seed("10.0.0.9")
        assert {baseline_load(seed) for _ in range(20)} == {3}

    def test_always_below_sixty(self):
        assert all(0 <= baseline_load(seed) < 60 for seed in range(256))


class TestRandomStatus:
    def test_mostly_up(self):
        rng = random.Random(1234)
        draws = [random_status(rng) for _ in range(5000)]
        up_share = draws.count(DeviceStatus.UP) / len(draws)
        assert 0.85 < up_share < 0.95
        assert DeviceStatus.WARNING in draws
        assert DeviceStatus.DOWN in draws


class TestSimulateSample:
    def test_values_in_range(self):
        rng = random.Random(7)
        for _ in range(200):
            sample = simulate_sample("10.0.0.9", "public", rng)
            # baseline 3: cpu in [-2, 18] clamped, memory in [3, 23]
            assert 0 <= sample.cpu <= 18
            assert 3 <= sample.memory <= 23
            assert 100 <= sample.traffic_in <= 900
            assert 100 <= sample.traffic_out <= 900
            assert re.fullmatch(r"\d{1,2}d \d{1,2}h", sample.uptime)

    def test_cpu_clamped_at_zero(self):
        # Seed 60 gives baseline 0, so negative jitter would go below zero
        rng = random.Random(3)
        samples = [simulate_sample("10.0.0.60", rng=rng) for _ in range(200)]
        assert min(s.cpu for s in samples) == 0

    def test_same_rng_seed_reproduces_sample(self):
        a = simulate_sample("10.0.0.9", rng=random.Random(99))
        b = simulate_sample("10.0.0.9", rng=random.Random(99))
        assert a == b

    def test_throughput_is_mean_of_traffic(self):
        sample = simulate_sample("10.0.0.9", rng=random.Random(5))
        assert sample.throughput == (sample.traffic_in + sample.traffic_out) / 2


class TestLinkHealth:
    @pytest.mark.parametrize(
        "bandwidth,expected",
        [
            (500, LinkStatus.HEALTHY),   # 50%
            (800, LinkStatus.WARNING),   # 80%
            (950, LinkStatus.CRITICAL),  # 95%
        ],
    )
    def test_tiers(self, bandwidth, expected):
        assert link_health(bandwidth, 1000) == expected

    def test_boundaries_are_exclusive(self):
        assert link_health(750, 1000) == LinkStatus.HEALTHY
        assert link_health(750.01, 1000) == LinkStatus.WARNING
        assert link_health(900, 1000) == LinkStatus.WARNING
        assert link_health(900.01, 1000) == LinkStatus.CRITICAL

    def test_zero_capacity_is_healthy(self):
        assert link_health(500, 0) == LinkStatus.HEALTHY

    def test_custom_thresholds(self):
        thresholds = LinkThresholds(warning=50, critical=70)
        assert link_health(600, 1000, thresholds) == LinkStatus.WARNING
        assert link_health(800, 1000, thresholds) == LinkStatus.CRITICAL
