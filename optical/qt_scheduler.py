# optical/qt_scheduler.py
"""
Timer scheduler on the Qt event loop: every call_later() is one single-shot
precise QTimer owned by the scheduler, cancellable until it fires.
Callbacks run on the thread that owns the scheduler (needs a running loop).
"""
from time import perf_counter
from PyQt5.QtCore import QObject, QTimer, Qt


class TimerHandle:
    def __init__(self, timer: QTimer):
        self._timer = timer

    @property
    def active(self) -> bool:
        return self._timer is not None

    def cancel(self):
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None

    def _fired(self) -> bool:
        # True only the first time, and only if not cancelled
        if self._timer is None:
            return False
        self._timer.deleteLater()
        self._timer = None
        return True


class QtScheduler(QObject):
    def call_later(self, delay_s: float, fn) -> TimerHandle:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.PreciseTimer)
        handle = TimerHandle(timer)

        def fire():
            if handle._fired():
                fn()

        timer.timeout.connect(fire)
        timer.start(max(0, int(round(float(delay_s) * 1000.0))))
        return handle

    def now(self) -> float:
        return perf_counter()
