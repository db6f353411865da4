# Flash_Morse.py
"""
Headless optical Morse runner.

  python Flash_Morse.py encode "SOS"                 # text  -> Morse string
  python Flash_Morse.py decode "... --- ..."         # Morse -> text
  python Flash_Morse.py send "HELLO" --port COM3     # blink an LED on a serial port
  python Flash_Morse.py receive --camera 0           # decode flashes seen by a camera
  python Flash_Morse.py loopback "CQ CQ" --noise 0.05 --jitter 0.05
"""
import argparse
import logging
import signal
import sys
from time import perf_counter

from morse.flash_decoder import FlashDecoder
from morse.pulse_encoder import expand_text
from morse.signal_sim import FlashChannelSimulator
from morse.symbol_table import text_to_morse, morse_to_text
from morse.timing import Timing
from morse.transceiver import TransceiverSession

log = logging.getLogger("flash_morse")


def _timing(args) -> Timing:
    kw = dict(brightness_threshold=args.threshold, debounce=args.debounce,
              adaptive=args.adaptive)
    if args.wpm:
        return Timing.from_wpm(args.wpm, **kw)
    return Timing(unit=args.unit, **kw)


def _echo(txt: str):
    sys.stdout.write(txt); sys.stdout.flush()


def _qt_app():
    from PyQt5.QtCore import QCoreApplication, QTimer
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # wake the loop so Python can run the SIGINT handler
    wake = QTimer(app); wake.timeout.connect(lambda: None); wake.start(200)
    return app


# ─────────────────────────── commands
def cmd_encode(args) -> int:
    print(text_to_morse(args.text))
    return 0


def cmd_decode(args) -> int:
    print(morse_to_text(args.morse, placeholder=args.placeholder))
    return 0


def cmd_send(args) -> int:
    from optical.light_sink import SerialLightSink, CallbackLightSink
    from optical.qt_scheduler import QtScheduler

    app = _qt_app()
    if args.port:
        sink = SerialLightSink(args.port, args.baud)
        sink.open()
    else:
        sink = CallbackLightSink(lambda on: log.info("light %s", "ON" if on else "off"))

    scheduler = QtScheduler()
    session = TransceiverSession(sink, scheduler, _timing(args),
                                 on_send_done=app.quit)
    if not session.start_send(args.text):
        log.error("Nothing to send: no supported characters in %r", args.text)
        return 1
    rc = app.exec_()
    session.cancel_send()
    if args.port:
        sink.close()
    return rc


def cmd_receive(args) -> int:
    from PyQt5.QtCore import QTimer
    from optical.camera_sampler import CameraSampler
    from optical.light_sink import NullLightSink
    from optical.qt_scheduler import QtScheduler

    app = _qt_app()
    session = TransceiverSession(NullLightSink(), QtScheduler(), _timing(args), on_text=_echo)
    cam = CameraSampler(args.camera, interval_ms=args.interval, region=args.region,
                        on_sample=session.feed_sample)
    if not cam.start():
        return 1
    session.start_receive()

    poll = QTimer(app); poll.setInterval(33)
    poll.timeout.connect(lambda: session.poll(perf_counter())); poll.start()
    if args.duration:
        QTimer.singleShot(int(args.duration * 1000), app.quit)

    rc = app.exec_()
    cam.stop()
    session.stop_receive()
    print()
    log.info("Received: %r", session.decoded_text)
    return rc


def cmd_loopback(args) -> int:
    timing = _timing(args)
    sim = FlashChannelSimulator(rate=args.fps, noise=args.noise, jitter=args.jitter, seed=args.seed)
    dec = FlashDecoder(timing, on_unknown=lambda s: log.debug("unknown group %s", s))
    t, x = sim.render(expand_text(args.text, timing), lead=timing.unit, tail=8 * timing.unit)
    for ts, v in zip(t.tolist(), x.tolist()):
        dec.feed(ts, v)
    dec.tick(float(t[-1]) if len(t) else 0.0)
    dec.flush()
    print(dec.morse)
    print(dec.text.strip())
    return 0


# ─────────────────────────── cli
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flash-morse", description="Optical Morse transceiver")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    def timing_opts(sp):
        sp.add_argument("--unit", type=float, default=0.2, help="dot length in seconds")
        sp.add_argument("--wpm", type=float, default=None, help="overrides --unit (PARIS)")
        sp.add_argument("--threshold", type=float, default=0.5, help="brightness threshold 0..1")
        sp.add_argument("--debounce", type=float, default=0.0, help="seconds a level must persist")
        sp.add_argument("--adaptive", action="store_true", help="track sender speed")

    sp = sub.add_parser("encode"); sp.add_argument("text"); sp.set_defaults(fn=cmd_encode)
    sp = sub.add_parser("decode"); sp.add_argument("morse")
    sp.add_argument("--placeholder", default=None); sp.set_defaults(fn=cmd_decode)

    sp = sub.add_parser("send"); sp.add_argument("text")
    sp.add_argument("--port", default=None); sp.add_argument("--baud", type=int, default=9600)
    timing_opts(sp); sp.set_defaults(fn=cmd_send)

    sp = sub.add_parser("receive")
    sp.add_argument("--camera", type=int, default=0)
    sp.add_argument("--interval", type=int, default=33, help="ms between frames")
    sp.add_argument("--region", type=int, default=40, help="centre square in pixels, 0 = whole frame")
    sp.add_argument("--duration", type=float, default=0.0, help="stop after N seconds")
    timing_opts(sp); sp.set_defaults(fn=cmd_receive)

    sp = sub.add_parser("loopback"); sp.add_argument("text")
    sp.add_argument("--fps", type=float, default=30.0)
    sp.add_argument("--noise", type=float, default=0.0)
    sp.add_argument("--jitter", type=float, default=0.0)
    sp.add_argument("--seed", type=int, default=None)
    timing_opts(sp); sp.set_defaults(fn=cmd_loopback)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s [%(levelname)s] %(message)s')
    return args.fn(args)


if __name__ == "__main__":
    sys.exit(main())
