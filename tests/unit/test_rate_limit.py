"""
Unit tests for the fixed-window request counter.
"""
import threading

from health_advisor.services.rate_limit import RequestCounter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRequestCounter:
    """Tests for RequestCounter."""

    def test_admits_up_to_limit(self):
        counter = RequestCounter(max_requests=10, window_seconds=60, clock=FakeClock())

        results = [counter.try_acquire() for _ in range(11)]

        assert results == [True] * 10 + [False]
        assert counter.count == 10

    def test_window_resets_after_expiry(self):
        clock = FakeClock()
        counter = RequestCounter(max_requests=2, window_seconds=60, clock=clock)
        counter.try_acquire()
        counter.try_acquire()
        assert counter.try_acquire() is False

        clock.now += 61

        assert counter.try_acquire() is True
        assert counter.count == 1

    def test_window_not_reset_at_boundary(self):
        clock = FakeClock()
        counter = RequestCounter(max_requests=1, window_seconds=60, clock=clock)
        counter.try_acquire()

        clock.now += 60

        assert counter.try_acquire() is False

    def test_reset(self):
        counter = RequestCounter(max_requests=1, window_seconds=60, clock=FakeClock())
        counter.try_acquire()

        counter.reset()

        assert counter.count == 0
        assert counter.try_acquire() is True

    def test_limit_holds_under_concurrency(self):
        counter = RequestCounter(max_requests=10, window_seconds=60)
        admitted = []
        lock = threading.Lock()

        def worker():
            for _ in range(5):
                if counter.try_acquire():
                    with lock:
                        admitted.append(1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(admitted) == 10
