# morse/flash_decoder.py
"""
FlashDecoder
------------
Edge-driven Morse decoder for a sampled brightness signal (camera, photocell).

Usage:
  dec = FlashDecoder(timing, on_text=cb_text)
  dec.feed(t, intensity)   # every sample, intensity in [0,1], t in seconds
  dec.tick(t)              # periodically: closes letters/words while dark

Notes:
- The sample rate is up to the caller; only edges matter.
- Each bright interval becomes "." or "-", each dark interval is an element
  gap, a letter gap (flush symbol) or a word gap (flush symbol + word).
- A dark interval flushes each level once, whichever of tick()/feed()/the
  closing edge gets there first.
- Samples older than the previous one are skipped.
"""
import logging
from enum import Enum
from statistics import median
from typing import List

from morse.symbol_table import SymbolTable, DEFAULT_TABLE, WORD_SEP
from morse.timing import Timing

log = logging.getLogger(__name__)

# flush level reached inside the current dark interval
_NONE, _LETTER, _WORD = 0, 1, 2


class DecoderState(Enum):
    IDLE = 0
    TRACKING_BRIGHT = 1
    TRACKING_DARK = 2


class FlashDecoder:
    def __init__(self, timing: Timing = None, table: SymbolTable = None,
                 on_symbol=None, on_char=None, on_word=None, on_text=None,
                 on_unknown=None, placeholder: str = None):
        self.timing = timing or Timing()
        self.table = table or DEFAULT_TABLE
        self.on_symbol = on_symbol      # "." / "-"
        self.on_char = on_char          # decoded character
        self.on_word = on_word          # completed word
        self.on_text = on_text          # chars, then " " at word boundaries
        self.on_unknown = on_unknown    # unknown symbol group (diagnostic)
        self.placeholder = placeholder  # emitted for unknown groups if set

        self._unit = self.timing.unit
        self._marks = []                # recent short marks (adaptive mode)
        self.reset()

    # ---------- API ----------
    def reset(self):
        """Back to IDLE: buffer, edge history and decoded output cleared."""
        self._state = DecoderState.IDLE
        self._bright = False
        self._last_edge = None
        self._last_sample = None
        self._pending = None            # first timestamp of an unconfirmed level change
        self._flushed = _NONE
        self._symbol: List[str] = []
        self._word: List[str] = []
        self._out: List[str] = []
        self._morse: List[str] = []
        self._unit = self.timing.unit
        self._marks.clear()

    @property
    def state(self) -> DecoderState:
        return self._state

    @property
    def is_bright(self) -> bool:
        return self._bright

    @property
    def current_symbol(self) -> str:
        return "".join(self._symbol)

    @property
    def current_word(self) -> str:
        return "".join(self._word)

    @property
    def text(self) -> str:
        return "".join(self._out)

    @property
    def morse(self) -> str:
        return " ".join(self._morse)

    @property
    def unit(self) -> float:
        return self._unit

    @property
    def wpm(self) -> float:
        return 1.2 / max(1e-6, self._unit)

    def feed(self, t: float, intensity: float):
        """One brightness sample."""
        t = float(t)
        if self._last_sample is not None and t < self._last_sample:
            log.debug("Out-of-order sample skipped (%.4f < %.4f)", t, self._last_sample)
            return
        self._last_sample = t
        bright = float(intensity) > self.timing.brightness_threshold

        if self._state is DecoderState.IDLE:
            self._last_edge = t
            self._enter(bright)
            return

        if bright == self._bright:
            self._pending = None
            if not bright:
                self._check_dark(t)
            return

        if self.timing.debounce <= 0.0:
            self._edge(t)
            return
        if self._pending is None:
            self._pending = t
        if t - self._pending >= self.timing.debounce:
            self._edge(self._pending)

    def feed_level(self, is_bright: bool, t: float):
        """Already thresholded input (keyer, photodiode comparator)."""
        self.feed(t, 1.0 if is_bright else 0.0)

    def tick(self, t: float):
        """Idle timeout check: classify the running dark interval as of time t."""
        t = float(t)
        if self._last_sample is not None and t < self._last_sample:
            return
        if self._pending is not None:
            # stream stalled on an unconfirmed change: confirm it by time
            if t - self._pending < self.timing.debounce:
                return
            self._edge(self._pending)
        if self._state is DecoderState.TRACKING_DARK:
            self._check_dark(t)

    def flush(self):
        """Commit whatever is buffered (end of reception)."""
        if self._pending is not None and self._bright:
            self._edge(self._pending)   # mark ended on the last samples
        self._flush_symbol()
        self._flush_word()

    # ---------- internals ----------
    def _enter(self, bright: bool):
        self._bright = bright
        self._flushed = _NONE
        self._state = DecoderState.TRACKING_BRIGHT if bright else DecoderState.TRACKING_DARK

    def _edge(self, t: float):
        dur = max(0.0, t - self._last_edge)
        if self._bright:
            self._on_mark(dur)
        else:
            self._check_dark(t)
        self._last_edge = t
        self._pending = None
        self._enter(not self._bright)

    def _on_mark(self, dur: float):
        if self.timing.adaptive:
            self._track_speed(dur)
        sym = "." if dur < self.timing.dash_boundary * self._unit else "-"
        self._symbol.append(sym)
        if self.on_symbol:
            self.on_symbol(sym)

    def _check_dark(self, t: float):
        dur = t - self._last_edge
        if dur > self.timing.word_boundary * self._unit:
            if self._flushed < _WORD:
                self._flush_symbol()
                self._flush_word()
                self._flushed = _WORD
        elif dur > self.timing.letter_boundary * self._unit:
            if self._flushed < _LETTER:
                self._flush_symbol()
                self._flushed = _LETTER
        # else: element gap

    def _track_speed(self, dur: float):
        # only marks that plausibly are dots
        if dur > 2.0 * self._unit:
            return
        self._marks.append(dur)
        if len(self._marks) > 7:
            self._marks.pop(0)
        est = 0.75 * self._unit + 0.25 * median(self._marks)
        base = self.timing.unit
        self._unit = max(0.5 * base, min(2.0 * base, est))

    def _flush_symbol(self):
        if not self._symbol:
            return
        code = "".join(self._symbol)
        self._symbol.clear()
        ch = self.table.decode_symbol(code)
        if ch is None:
            log.debug("Unknown symbol %r dropped", code)
            if self.on_unknown:
                self.on_unknown(code)
            if not self.placeholder:
                return
            ch = self.placeholder
        self._morse.append(code)
        self._word.append(ch)
        if self.on_char:
            self.on_char(ch)
        self._emit(ch)

    def _flush_word(self):
        if not self._word:
            return
        word = "".join(self._word)
        self._word.clear()
        self._morse.append(WORD_SEP)
        if self.on_word:
            self.on_word(word)
        self._emit(" ")

    def _emit(self, txt: str):
        self._out.append(txt)
        if self.on_text:
            self.on_text(txt)
