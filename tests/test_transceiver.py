import pytest

from conftest import RecordingSink
from morse.pulse_encoder import expand_text
from morse.timing import Timing
from morse.transceiver import TransceiverSession

U = 0.25


@pytest.fixture
def session(scheduler, sink):
    return TransceiverSession(sink, scheduler, Timing(unit=U))


def receive(session, text):
    pulses = expand_text(text, session.timing)
    t = 0.0
    for p in pulses:
        session.feed_sample(t, 1.0 if p.is_light else 0.0)
        t += p.duration
    session.feed_sample(t, 0.0)
    return t


def test_initial_state(session):
    assert not session.is_sending
    assert not session.is_receiving
    assert session.send_progress == 0.0
    assert session.decoded_text == ""
    assert session.has_light


def test_send_runs_to_completion(session, scheduler, sink):
    done = []
    session.on_send_done = lambda: done.append(True)
    assert session.start_send("SOS")
    assert session.is_sending
    scheduler.advance(5 * U)
    assert 0.0 < session.send_progress < 1.0
    scheduler.run_all()
    assert done == [True]
    assert not session.is_sending
    assert session.send_progress == 1.0
    assert sink.on is False


def test_send_last_call_wins(session, scheduler, sink):
    session.start_send("SOS")
    scheduler.advance(2 * U)
    session.start_send_morse("-")
    scheduler.run_all()
    assert scheduler.now() == pytest.approx(2 * U + 3 * U)
    assert sink.events[-1] == (5 * U, False)


def test_cancel_send(session, scheduler, sink):
    session.start_send("PARIS")
    scheduler.advance(U / 2)
    assert sink.on
    session.cancel_send()
    assert not session.is_sending
    assert sink.on is False
    assert scheduler.pending() == []


def test_samples_ignored_until_receiving(session):
    receive(session, "E")
    session.poll(100.0)
    assert session.decoded_text == ""


def test_receive_and_poll(session):
    got = []
    session.on_text = got.append
    session.start_receive()
    end = receive(session, "HI")
    session.poll(end + 2 * U)
    assert session.decoded_text == "H"
    session.poll(end + 8 * U)
    assert session.decoded_text == "HI "
    assert session.decoded_morse == ".... .. /"
    assert "".join(got) == "HI "


def test_stop_receive_flushes_and_goes_idle(session):
    session.start_receive()
    receive(session, "TEST")
    assert session.decoded_text == "TES"
    session.stop_receive()
    assert session.decoded_text == "TEST "
    assert not session.is_receiving
    assert session.decoder.current_symbol == ""
    assert session.decoder.state.name == "IDLE"
    session.stop_receive()
    assert session.decoded_text == "TEST "


def test_stop_receive_keeps_mark_cut_short_by_debounce(scheduler, sink):
    session = TransceiverSession(sink, scheduler, Timing(unit=U, debounce=0.04))
    session.start_receive()
    session.feed_sample(0.0, 0.0)
    for t in (0.1, 0.2, 0.35):
        session.feed_sample(t, 1.0)
    session.feed_sample(0.85, 0.0)      # last frame before the camera stops
    session.stop_receive()
    assert session.decoded_text == "T "


def test_restart_receive_keeps_text(session):
    session.start_receive()
    receive(session, "EE")
    session.start_receive()
    assert session.decoder.current_symbol == ""
    assert session.decoded_text == "E"


def test_duplex(session, scheduler, sink):
    session.start_receive()
    session.start_send("SOS")
    end = receive(session, "OK")
    scheduler.run_all()
    session.poll(end + 10)
    assert session.decoded_text == "OK "
    assert not session.is_sending


def test_reset(session, scheduler, sink):
    session.start_send("SOS")
    session.start_receive()
    receive(session, "OK")
    session.reset()
    assert not session.is_sending
    assert not session.is_receiving
    assert session.decoded_text == ""
    assert sink.on is False
    session.reset()
    assert session.decoder.state.name == "IDLE"


def test_unavailable_light_still_schedules(scheduler, caplog):
    class NoLight(RecordingSink):
        is_available = False

    s = TransceiverSession(NoLight(scheduler), scheduler, Timing(unit=U))
    assert not s.has_light
    assert s.start_send("E")
    scheduler.run_all()
    assert any("No light sink" in r.getMessage() for r in caplog.records)


def test_sessions_are_independent(scheduler):
    a = TransceiverSession(RecordingSink(scheduler), scheduler, Timing(unit=U))
    b = TransceiverSession(RecordingSink(scheduler), scheduler, Timing(unit=U))
    a.start_receive()
    b.start_receive()
    receive(a, "E")
    a.stop_receive()
    assert a.decoded_text == "E "
    assert b.decoded_text == ""
