import threading
import time

from lecture_quiz.ticker import ElapsedTicker, format_elapsed


def test_format_elapsed():
    assert format_elapsed(0) == "00:00"
    assert format_elapsed(65) == "01:05"
    assert format_elapsed(3600) == "60:00"
    assert format_elapsed(-4) == "00:00"


def test_ticker_calls_callback():
    fired = threading.Event()
    ticker = ElapsedTicker(fired.set, interval=0.01)
    ticker.start()
    try:
        assert fired.wait(2)
    finally:
        ticker.stop()
    assert not ticker.running


def test_start_twice_keeps_one_thread():
    ticker = ElapsedTicker(lambda: None, interval=0.01)
    ticker.start()
    ticker.start()
    try:
        names = [t.name for t in threading.enumerate() if t.name == "elapsed-ticker"]
        assert len(names) == 1
    finally:
        ticker.stop()


def test_stop_is_idempotent():
    ticker = ElapsedTicker(lambda: None, interval=0.01)
    ticker.stop()
    ticker.start()
    ticker.stop()
    ticker.stop()
    assert not ticker.running


def test_no_callbacks_after_stop():
    calls = []
    ticker = ElapsedTicker(lambda: calls.append(1), interval=0.01)
    ticker.start()
    time.sleep(0.05)
    ticker.stop()
    count = len(calls)
    time.sleep(0.05)
    assert len(calls) == count


def test_toggle():
    ticker = ElapsedTicker(lambda: None, interval=0.01)
    assert ticker.toggle() is True
    assert ticker.running
    assert ticker.toggle() is False
    assert not ticker.running


def test_failing_callback_stops_ticker():
    def boom():
        raise RuntimeError("display gone")

    ticker = ElapsedTicker(boom, interval=0.01)
    ticker.start()
    ticker._thread.join(2)
    assert not ticker.running
    ticker.stop()
