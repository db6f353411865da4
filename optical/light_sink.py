# optical/light_sink.py
"""
Light sinks for the PulseSequencer.

  SerialLightSink   : LED driven by a microcontroller on a serial port
                      (b'1' = ON, b'0' = OFF, one byte per transition)
  CallbackLightSink : any callable(on: bool), e.g. a full-screen flash widget
  NullLightSink     : no hardware; is_available=False, everything is a no-op

Every sink raises only LightError from set_light().
"""
import logging
import serial

from morse.pulse_encoder import LightError

log = logging.getLogger(__name__)


class NullLightSink:
    is_available = False

    def set_light(self, on: bool):
        pass


class CallbackLightSink:
    is_available = True

    def __init__(self, fn):
        self._fn = fn

    def set_light(self, on: bool):
        try:
            self._fn(bool(on))
        except Exception as e:
            raise LightError(str(e)) from e


class SerialLightSink:
    ON, OFF = b'1', b'0'

    def __init__(self, port='COM3', baud=9600):
        self.port, self.baud = port, baud
        self.ser = None

    @property
    def is_available(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def open(self) -> bool:
        if self.is_available:
            return True
        try:
            # plain device names and pyserial URLs (socket://, rfc2217://, loop://)
            self.ser = serial.serial_for_url(self.port, baudrate=self.baud,
                                             timeout=0.05, write_timeout=0.05)
        except serial.SerialException as e:
            log.warning("Serial light sink %s unavailable: %s", self.port, e)
            self.ser = None
            return False
        log.info("Serial light sink on %s @ %d", self.port, self.baud)
        return True

    def close(self):
        if self.ser is not None:
            try:
                self.ser.write(self.OFF)
            except serial.SerialException as e:
                log.debug("Final OFF not written on %s: %s", self.port, e)
            self.ser.close()
        self.ser = None

    def set_light(self, on: bool):
        if not self.is_available:
            return
        try:
            self.ser.write(self.ON if on else self.OFF)
            self.ser.flush()
        except serial.SerialException as e:
            raise LightError(f"{self.port}: {e}") from e
