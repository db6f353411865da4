# morse/signal_sim.py
"""
Optical channel simulator: renders a Pulse list into the brightness samples a
camera pointed at the light would produce.

  sim = FlashChannelSimulator(rate=30.0, noise=0.05, jitter=0.05, seed=1)
  t, x = sim.render(pulses, lead=0.5, tail=2.0)
  for ts, v in zip(t, x): decoder.feed(ts, v)
"""
import numpy as np


class FlashChannelSimulator:
    """
    - rate       : samples per second (camera fps)
    - on/off     : intensity of the lit / dark light in [0,1]
    - noise      : std of additive gaussian noise on the intensity
    - jitter     : relative std applied to every pulse duration (sender drift)
    """

    def __init__(self, rate: float = 60.0, on_level: float = 0.9, off_level: float = 0.1,
                 noise: float = 0.0, jitter: float = 0.0, seed=None):
        if rate <= 0:
            raise ValueError("rate must be > 0")
        self.rate = float(rate)
        self.on_level = float(on_level)
        self.off_level = float(off_level)
        self.noise = float(noise)
        self.jitter = float(jitter)
        self._rng = np.random.default_rng(seed)

    def durations(self, pulses):
        d = np.array([p.duration for p in pulses], dtype=float)
        if self.jitter > 0 and len(d):
            d = d * np.clip(1.0 + self._rng.normal(0.0, self.jitter, len(d)), 0.2, None)
        return d

    def render(self, pulses, lead: float = 0.0, tail: float = 0.0, t0: float = 0.0):
        """Returns (timestamps, intensities) as float arrays."""
        durs = np.concatenate([[lead], self.durations(pulses), [tail]])
        levels = np.array([self.off_level]
                          + [self.on_level if p.is_light else self.off_level for p in pulses]
                          + [self.off_level], dtype=float)
        edges = np.concatenate([[0.0], np.cumsum(durs)])

        n = int(np.floor(edges[-1] * self.rate)) + 1
        t = np.arange(n, dtype=float) / self.rate
        idx = np.clip(np.searchsorted(edges, t, side="right") - 1, 0, len(levels) - 1)
        x = levels[idx]
        if self.noise > 0:
            x = x + self._rng.normal(0.0, self.noise, n)
        return t0 + t, np.clip(x, 0.0, 1.0)

    def samples(self, pulses, **kw):
        t, x = self.render(pulses, **kw)
        return list(zip(t.tolist(), x.tolist()))
