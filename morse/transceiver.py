# morse/transceiver.py
"""
TransceiverSession
------------------
Duplex optical Morse session: one PulseSequencer (TX, light sink) and one
FlashDecoder (RX, brightness samples). The two sides share only the symbol
table; they can run at the same time.

Construct one per consumer and pass it around, there is no shared instance.
"""
import logging
from typing import Callable

from morse.flash_decoder import FlashDecoder
from morse.pulse_encoder import PulseSequencer
from morse.symbol_table import SymbolTable, DEFAULT_TABLE
from morse.timing import Timing

log = logging.getLogger(__name__)


class TransceiverSession:
    def __init__(self, light_sink, scheduler, timing: Timing = None,
                 table: SymbolTable = None,
                 on_text: Callable[[str], None] = None,
                 on_send_progress: Callable[[float], None] = None,
                 on_send_done: Callable[[], None] = None):
        self.timing = timing or Timing()
        self.table = table or DEFAULT_TABLE
        self.light = light_sink
        self.on_text = on_text
        self.on_send_progress = on_send_progress
        self.on_send_done = on_send_done

        self._tx = PulseSequencer(light_sink, scheduler, self.timing, self.table,
                                  on_progress=self._tx_progress, on_done=self._tx_done)
        self._rx = FlashDecoder(self.timing, self.table, on_text=self._rx_text)
        self._receiving = False
        self._received = []

    # ---------- observers ----------
    @property
    def has_light(self) -> bool:
        return bool(getattr(self.light, "is_available", True))

    @property
    def is_sending(self) -> bool:
        return self._tx.is_running

    @property
    def send_progress(self) -> float:
        return self._tx.progress

    @property
    def is_receiving(self) -> bool:
        return self._receiving

    @property
    def decoded_text(self) -> str:
        return "".join(self._received)

    @property
    def decoded_morse(self) -> str:
        return self._rx.morse

    @property
    def decoder(self) -> FlashDecoder:
        return self._rx

    # ---------- TX ----------
    def start_send(self, text: str) -> bool:
        """Last call wins: a running transmission is cancelled first."""
        if not self.has_light:
            log.warning("No light sink available, transmission runs dark")
        return self._tx.start(text)

    def start_send_morse(self, morse: str) -> bool:
        if not self.has_light:
            log.warning("No light sink available, transmission runs dark")
        return self._tx.start_morse(morse)

    def cancel_send(self):
        self._tx.stop()

    # ---------- RX ----------
    def start_receive(self):
        # restart = fresh decode buffer, received text is kept
        self._rx.reset()
        self._receiving = True
        log.info("Receiving (unit %.3f s, threshold %.2f)",
                 self.timing.unit, self.timing.brightness_threshold)

    def stop_receive(self):
        if self._receiving:
            self._rx.flush()
        self._receiving = False
        self._rx.reset()

    def feed_sample(self, t: float, intensity: float):
        if self._receiving:
            self._rx.feed(t, intensity)

    def poll(self, t: float):
        if self._receiving:
            self._rx.tick(t)

    def reset(self):
        self.cancel_send()
        self._receiving = False
        self._rx.reset()
        self._received.clear()

    # ---------- callbacks ----------
    def _rx_text(self, txt: str):
        self._received.append(txt)
        if self.on_text:
            self.on_text(txt)

    def _tx_progress(self, p: float):
        if self.on_send_progress:
            self.on_send_progress(p)

    def _tx_done(self):
        if self.on_send_done:
            self.on_send_done()
