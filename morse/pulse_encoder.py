# morse/pulse_encoder.py
"""
PulseSequencer
--------------
Expands text (or a Morse string) into a Pulse list and plays it on a light
sink, one scheduled callback per pulse. Nothing here sleeps: every transition
is a cancellable timer callback on the scheduler.

Usage:
  seq = PulseSequencer(light_sink, scheduler, on_progress=cb, on_done=cb_done)
  seq.start("SOS")      # returns False if nothing to send
  seq.stop()            # safe at any time, light forced OFF

Scheduler contract: scheduler.call_later(delay_s, fn) -> handle, handle.cancel().
Light sink contract: sink.set_light(on: bool), may raise LightError.
"""
import logging
from typing import Callable, List

from morse.symbol_table import SymbolTable, DEFAULT_TABLE, WORD_SEP
from morse.timing import Timing, Pulse, PulseKind

log = logging.getLogger(__name__)


class LightError(Exception):
    """Raised by a light sink that could not change state."""


# ─────────────────────────────────────────────────────────────────────────────
def expand_symbols(groups, timing: Timing) -> List[Pulse]:
    """
    groups: iterable of Morse groups ("...", "-", ...) or WORD_SEP.
    ElementGap only inside a group, LetterGap only between two groups,
    WORD_SEP becomes one WordGap. Consecutive WordGaps are kept (they add up).
    """
    seq: List[Pulse] = []
    prev_letter = False
    for g in groups:
        if g == WORD_SEP:
            seq.append(timing.pulse(PulseKind.WORD_GAP))
            prev_letter = False
            continue
        elements = [e for e in g if e in ".-"]
        if not elements:
            continue
        if prev_letter:
            seq.append(timing.pulse(PulseKind.LETTER_GAP))
        for i, e in enumerate(elements):
            if i:
                seq.append(timing.pulse(PulseKind.ELEMENT_GAP))
            seq.append(timing.pulse(PulseKind.DOT if e == "." else PulseKind.DASH))
        prev_letter = True
    return seq


def expand_text(text: str, timing: Timing, table: SymbolTable = DEFAULT_TABLE) -> List[Pulse]:
    groups = []
    for c in text or "":
        sym = table.encode_char(c)
        if sym is not None:     # unmapped chars: no pulses, no gap
            groups.append(sym)
    return expand_symbols(groups, timing)


def expand_morse(morse: str, timing: Timing) -> List[Pulse]:
    return expand_symbols((morse or "").split(), timing)


def total_duration(pulses) -> float:
    return sum(p.duration for p in pulses)


# ─────────────────────────────────────────────────────────────────────────────
class PulseSequencer:
    def __init__(self, light_sink, scheduler, timing: Timing = None,
                 table: SymbolTable = None,
                 on_progress: Callable[[float], None] = None,
                 on_done: Callable[[], None] = None):
        self.light = light_sink
        self.scheduler = scheduler
        self.timing = timing or Timing()
        self.table = table or DEFAULT_TABLE
        self.on_progress = on_progress
        self.on_done = on_done

        self._seq: List[Pulse] = []
        self._idx = 0
        self._handle = None
        self._run_id = 0          # bumps on every start/stop: stale callbacks are ignored
        self._running = False
        self._light_on = False
        self._warned = False

    # ---------- API ----------
    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def progress(self) -> float:
        if not self._seq:
            return 0.0
        return min(1.0, self._idx / float(len(self._seq)))

    @property
    def pulses(self) -> List[Pulse]:
        return list(self._seq)

    def start(self, text: str) -> bool:
        return self._start_pulses(expand_text(text, self.timing, self.table))

    def start_morse(self, morse: str) -> bool:
        return self._start_pulses(expand_morse(morse, self.timing))

    def stop(self):
        """Cancel the run (if any) and force the light OFF."""
        was_running = self._running
        self._run_id += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._running = False
        self._seq = []
        self._idx = 0
        self._set_light(False, force=True)
        if was_running:
            log.info("Transmission cancelled")

    # ---------- internals ----------
    def _start_pulses(self, pulses: List[Pulse]) -> bool:
        if self._running:
            self.stop()
        self._run_id += 1
        self._seq, self._idx = [], 0
        if not pulses:
            log.debug("Nothing to transmit")
            return False
        self._seq = pulses
        self._running = True
        self._warned = False
        log.info("Transmitting %d pulses (%.2f s)", len(pulses), total_duration(pulses))
        self._play(self._run_id)
        return True

    def _play(self, run_id: int):
        p = self._seq[self._idx]
        self._set_light(p.is_light)
        self._handle = self.scheduler.call_later(p.duration, lambda: self._advance(run_id))

    def _advance(self, run_id: int):
        if run_id != self._run_id or not self._running:
            return      # cancelled or superseded run
        self._handle = None
        self._idx += 1
        self._emit_progress()
        if run_id != self._run_id:
            return      # on_progress restarted or stopped us
        if self._idx < len(self._seq):
            self._play(run_id)
        else:
            self._finish()

    def _finish(self):
        self._running = False
        self._run_id += 1
        self._set_light(False, force=True)
        log.info("Transmission complete")
        if self.on_done:
            self.on_done()

    def _emit_progress(self):
        if self.on_progress:
            self.on_progress(self.progress)

    def _set_light(self, on: bool, force: bool = False):
        if on == self._light_on and not force:
            return
        self._light_on = on
        try:
            self.light.set_light(on)
        except LightError as e:
            # keep the logical schedule going without visible light
            if not self._warned:
                log.warning("Light sink failure, continuing without light: %s", e)
                self._warned = True
