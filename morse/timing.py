# morse/timing.py
"""
Canonical Morse durations (in units) and decoder classification thresholds.

  dot = 1u   dash = 3u   element gap = 1u   letter gap = 3u   word gap = 7u

Default thresholds (multiples of the unit):
  bright <  1.5u -> dot, otherwise dash
  dark   >  2.4u -> end of letter
  dark   >  5.6u -> end of word
"""
from dataclasses import dataclass
from enum import Enum


class PulseKind(Enum):
    DOT = 1
    DASH = 3
    ELEMENT_GAP = -1
    LETTER_GAP = -3
    WORD_GAP = -7

    @property
    def units(self) -> int:
        return abs(self.value)

    @property
    def is_light(self) -> bool:
        return self.value > 0


@dataclass(frozen=True)
class Pulse:
    kind: PulseKind
    duration: float     # seconds

    @property
    def is_light(self) -> bool:
        return self.kind.is_light


@dataclass(frozen=True)
class Timing:
    unit: float = 0.2                   # dot length (s)
    brightness_threshold: float = 0.5   # intensity > thr -> bright
    dash_boundary: float = 1.5          # x unit
    letter_boundary: float = 2.4        # x unit
    word_boundary: float = 5.6          # x unit
    debounce: float = 0.0               # s, min persistence of a level change
    adaptive: bool = False              # track sender speed from short marks

    def __post_init__(self):
        if self.unit <= 0:
            raise ValueError(f"unit must be > 0, got {self.unit}")
        if not (0.0 <= self.brightness_threshold <= 1.0):
            raise ValueError(f"brightness_threshold outside [0,1]: {self.brightness_threshold}")
        if not (1.0 < self.dash_boundary < self.letter_boundary < self.word_boundary):
            raise ValueError(
                "thresholds must satisfy 1 < dash < letter < word, got "
                f"{self.dash_boundary} / {self.letter_boundary} / {self.word_boundary}")
        if self.debounce < 0:
            raise ValueError(f"debounce must be >= 0, got {self.debounce}")

    @classmethod
    def from_wpm(cls, wpm: float, **kw) -> "Timing":
        # PARIS: dot = 1.2 / WPM
        if wpm <= 0:
            raise ValueError(f"wpm must be > 0, got {wpm}")
        return cls(unit=1.2 / float(wpm), **kw)

    @property
    def wpm(self) -> float:
        return 1.2 / self.unit

    def duration(self, kind: PulseKind) -> float:
        return kind.units * self.unit

    def pulse(self, kind: PulseKind) -> Pulse:
        return Pulse(kind, self.duration(kind))
