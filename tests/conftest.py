import pytest

from morse.pulse_encoder import LightError


class FakeHandle:
    def __init__(self, due, fn, order):
        self.due, self.fn, self.order = due, fn, order
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock: callbacks only run inside advance()/run_all()."""

    def __init__(self):
        self.t = 0.0
        self._handles = []
        self._order = 0

    def now(self):
        return self.t

    def call_later(self, delay, fn):
        self._order += 1
        h = FakeHandle(self.t + delay, fn, self._order)
        self._handles.append(h)
        return h

    def pending(self):
        return [h for h in self._handles if not h.cancelled and not h.fired]

    def step(self):
        live = self.pending()
        if not live:
            return False
        h = min(live, key=lambda x: (x.due, x.order))
        self.t = max(self.t, h.due)
        h.fired = True
        h.fn()
        return True

    def advance(self, dt):
        target = self.t + dt
        while True:
            live = [h for h in self.pending() if h.due <= target + 1e-9]
            if not live:
                break
            self.step()
        self.t = target

    def run_all(self, limit=10000):
        n = 0
        while self.step():
            n += 1
            assert n < limit, "scheduler did not drain"


class RecordingSink:
    """Light sink that logs (time, on) transitions against the fake clock."""
    is_available = True

    def __init__(self, scheduler, fail=False):
        self.scheduler = scheduler
        self.fail = fail
        self.events = []
        self.on = False

    def set_light(self, on):
        if self.fail:
            raise LightError("torch busy")
        self.on = bool(on)
        self.events.append((round(self.scheduler.now(), 6), self.on))


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def sink(scheduler):
    return RecordingSink(scheduler)


def feed_intervals(decoder, intervals, t0=0.0, step=None):
    """
    intervals: [(is_bright, seconds), ...]. Feeds one sample at each level
    change (or every `step` seconds when given) and returns the end time.
    """
    t = t0
    for bright, dur in intervals:
        level = 1.0 if bright else 0.0
        if step:
            n = max(1, int(round(dur / step)))
            for i in range(n):
                decoder.feed(t + i * step, level)
        else:
            decoder.feed(t, level)
        t += dur
    return t
