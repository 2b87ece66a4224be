import unittest
from concurrent.futures import ThreadPoolExecutor

from bc_solar.calculation_cache import CalculationCache, make_cache_key
from bc_solar.calculator import calculate_commercial_solar, compute
from bc_solar.inputs import (
    BatteryStorage,
    CalculationInput,
    InstallationType,
    PanelQuality,
    RateTier,
)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class BrokenCache:
    def get(self, inputs):
        raise RuntimeError("cache unavailable")

    def set(self, inputs, result):
        raise RuntimeError("cache unavailable")


def make_input(system_size_kw=100.0, **overrides) -> CalculationInput:
    values = dict(
        system_size_kw=system_size_kw,
        monthly_usage_kwh=20000,
        current_monthly_bill_cad=2500,
        rate_tier='Medium General Service',
        installation_type='Roof-Mount',
        panel_quality='Standard Efficiency',
        battery_storage='No Battery',
        location_region='Vancouver',
    )
    values.update(overrides)
    return CalculationInput(**values)


class TestCacheKey(unittest.TestCase):
    def test_field_order_does_not_matter(self):
        a = CalculationInput(
            system_size_kw=100,
            monthly_usage_kwh=20000,
            current_monthly_bill_cad=2500,
            rate_tier=RateTier.MEDIUM_GENERAL,
            installation_type=InstallationType.ROOF_MOUNT,
            panel_quality=PanelQuality.STANDARD,
            battery_storage=BatteryStorage.NONE,
            location_region='Vancouver',
        )
        b = CalculationInput(
            location_region='Vancouver',
            battery_storage='No Battery',
            panel_quality='Standard Efficiency',
            installation_type='Roof-Mount',
            rate_tier='Medium General Service',
            current_monthly_bill_cad=2500.0,
            monthly_usage_kwh=20000.0,
            system_size_kw=100.0,
        )
        self.assertEqual(make_cache_key(a), make_cache_key(b))

    def test_different_values_give_different_keys(self):
        self.assertNotEqual(
            make_cache_key(make_input(location_region='Vancouver')),
            make_cache_key(make_input(location_region='Victoria'))
        )
        self.assertNotEqual(
            make_cache_key(make_input(current_monthly_bill_cad=2500)),
            make_cache_key(make_input(current_monthly_bill_cad=2600))
        )


class TestCacheExpiry(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = CalculationCache(clock=self.clock)
        self.inputs = make_input()
        self.result = compute(self.inputs)

    def test_miss_on_empty_cache(self):
        self.assertIsNone(self.cache.get(self.inputs))

    def test_hit_before_ttl(self):
        self.cache.set(self.inputs, self.result)
        self.clock.advance(299.999)
        self.assertIs(self.result, self.cache.get(self.inputs))

    def test_miss_at_ttl_evicts_entry(self):
        self.cache.set(self.inputs, self.result)
        self.clock.advance(300)
        self.assertIsNone(self.cache.get(self.inputs))
        self.assertEqual(0, len(self.cache))

    def test_set_refreshes_timestamp(self):
        self.cache.set(self.inputs, self.result)
        self.clock.advance(200)
        self.cache.set(self.inputs, self.result)
        self.clock.advance(200)
        self.assertIs(self.result, self.cache.get(self.inputs))

    def test_custom_ttl(self):
        cache = CalculationCache(ttl_seconds=10, clock=self.clock)
        cache.set(self.inputs, self.result)
        self.clock.advance(10)
        self.assertIsNone(cache.get(self.inputs))

    def test_clear(self):
        self.cache.set(self.inputs, self.result)
        self.cache.clear()
        self.assertEqual(0, len(self.cache))
        self.assertIsNone(self.cache.get(self.inputs))


class TestCacheCleanup(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = CalculationCache(clock=self.clock)

    def fill(self, count, start=1):
        for size in range(start, start + count):
            inputs = make_input(system_size_kw=size)
            self.cache.set(inputs, compute(inputs))

    def test_cleanup_removes_expired_entries(self):
        self.fill(100)
        self.assertEqual(100, len(self.cache))

        self.clock.advance(301)
        self.fill(1, start=500)
        self.assertEqual(1, len(self.cache))

    def test_live_entries_are_never_evicted(self):
        self.fill(150)
        self.assertEqual(150, len(self.cache))

    def test_no_cleanup_at_threshold(self):
        self.fill(50)
        self.clock.advance(301)
        self.fill(50, start=200)
        # 100 entries is not over the threshold, so expired ones stay until read
        self.assertEqual(100, len(self.cache))


class TestCachedCalculation(unittest.TestCase):
    def test_cache_does_not_change_result(self):
        cache = CalculationCache()
        inputs = make_input(system_size_kw=250, location_region='Kamloops')

        first = calculate_commercial_solar(inputs, cache=cache)
        second = calculate_commercial_solar(inputs, cache=cache)

        self.assertEqual(compute(inputs), first)
        self.assertIs(first, second)
        self.assertEqual(1, len(cache))

    def test_without_cache(self):
        inputs = make_input()
        self.assertEqual(compute(inputs), calculate_commercial_solar(inputs))

    def test_recomputes_after_expiry(self):
        clock = FakeClock()
        cache = CalculationCache(clock=clock)
        inputs = make_input()

        first = calculate_commercial_solar(inputs, cache=cache)
        clock.advance(300)
        second = calculate_commercial_solar(inputs, cache=cache)

        self.assertIsNot(first, second)
        self.assertEqual(first, second)

    def test_broken_cache_falls_back_to_compute(self):
        inputs = make_input()
        with self.assertLogs('bc_solar.calculator', level='WARNING') as logs:
            result = calculate_commercial_solar(inputs, cache=BrokenCache())

        self.assertEqual(compute(inputs), result)
        self.assertEqual(2, len(logs.records))


class TestCacheThreads(unittest.TestCase):
    def test_shared_cache_stays_consistent(self):
        cache = CalculationCache()
        inputs_list = [make_input(system_size_kw=size) for size in range(20, 40)]
        expected = {inputs: compute(inputs) for inputs in inputs_list}

        def calculate(i):
            inputs = inputs_list[i % len(inputs_list)]
            return inputs, calculate_commercial_solar(inputs, cache=cache)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(calculate, range(400)))

        self.assertEqual(400, len(results))
        for inputs, result in results:
            self.assertEqual(expected[inputs], result)
        self.assertEqual(len(inputs_list), len(cache))

    def test_concurrent_sets_and_cleanup(self):
        clock = FakeClock()
        cache = CalculationCache(cleanup_threshold=10, clock=clock)
        stale = [make_input(system_size_kw=size) for size in range(1, 11)]
        for inputs in stale:
            cache.set(inputs, compute(inputs))
        clock.advance(301)

        fresh = [make_input(system_size_kw=size) for size in range(100, 130)]

        def store(inputs):
            cache.set(inputs, compute(inputs))
            return cache.get(inputs)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(store, fresh))

        self.assertTrue(all(result is not None for result in results))
        self.assertEqual(len(fresh), len(cache))
        for inputs in stale:
            self.assertIsNone(cache.get(inputs))


if __name__ == "__main__":
    unittest.main()
