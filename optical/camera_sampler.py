# optical/camera_sampler.py
"""
CameraSampler
-------------
Brightness sampler on an OpenCV capture device. A QTimer grabs a frame every
`interval_ms`, reduces it to the mean grey level of a centre square in [0,1]
and delivers (perf_counter timestamp, intensity).

  cam = CameraSampler(0, on_sample=session.feed_sample)
  cam.sample.connect(...)      # same data as a Qt signal
  cam.start()                  # False if the camera cannot be opened
"""
import logging
from time import perf_counter

import cv2
import numpy as np
from PyQt5.QtCore import QObject, QTimer, pyqtSignal

log = logging.getLogger(__name__)


def frame_brightness(frame, region: int = 40) -> float:
    """Mean grey level of a `region`-pixel square at the frame centre (0 = whole frame)."""
    if frame is None or frame.size == 0:
        return 0.0
    gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if frame.ndim == 3 else frame
    if region:
        h, w = gray.shape[:2]
        half = max(1, int(region) // 2)
        cy, cx = h // 2, w // 2
        gray = gray[max(0, cy - half):cy + half, max(0, cx - half):cx + half]
    return float(np.mean(gray)) / 255.0


class CameraSampler(QObject):
    sample = pyqtSignal(float, float)   # (timestamp, intensity)

    def __init__(self, index: int = 0, interval_ms: int = 33, region: int = 40,
                 on_sample=None, parent=None):
        super().__init__(parent)
        self.index = index
        self.region = region
        self.on_sample = on_sample
        self.brightness = 0.0
        self._cap = None
        self._failed_reads = 0

        self._timer = QTimer(self)
        self._timer.setInterval(int(interval_ms))
        self._timer.timeout.connect(self._grab)

    @property
    def is_available(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    def start(self) -> bool:
        if self.is_running:
            return True
        self._cap = cv2.VideoCapture(self.index)
        if not self._cap.isOpened():
            log.warning("Camera %s could not be opened", self.index)
            self._cap = None
            return False
        self._failed_reads = 0
        self._timer.start()
        log.info("Camera %s sampling every %d ms", self.index, self._timer.interval())
        return True

    def stop(self):
        self._timer.stop()
        if self._cap is not None:
            self._cap.release()
        self._cap = None

    def _grab(self):
        ok, frame = self._cap.read()
        if not ok:
            self._failed_reads += 1
            if self._failed_reads == 1:
                log.warning("Camera %s: frame read failed", self.index)
            return
        self._failed_reads = 0
        t = perf_counter()
        self.brightness = frame_brightness(frame, self.region)
        self.sample.emit(t, self.brightness)
        if self.on_sample:
            self.on_sample(t, self.brightness)
