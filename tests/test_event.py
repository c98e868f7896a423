import threading
from dataclasses import dataclass

from orderflow.event import Event, EventBus, EventHandler


@dataclass
class _Named:
    name: str
    payload: str = ""


class _Recorder:
    def __init__(self):
        self.seen = []
        self._lock = threading.Lock()

    def handle(self, event):
        with self._lock:
            self.seen.append(event)


class _Exploding:
    def handle(self, event):
        raise RuntimeError("handler broke")


class _BarrierHandler:
    def __init__(self, barrier):
        self.barrier = barrier
        self.passed = False

    def handle(self, event):
        self.barrier.wait()
        self.passed = True


def test_protocols_recognise_implementations():
    event = _Named("order.created")
    recorder = _Recorder()
    assert isinstance(event, Event) is True
    assert isinstance(recorder, EventHandler) is True
    assert isinstance(object(), EventHandler) is False
    bus = EventBus()
    bus.register_handler(event.name, recorder)
    bus.publish(event)
    assert recorder.seen == [event]


def test_publish_reaches_registered_handler():
    bus = EventBus()
    recorder = _Recorder()
    bus.register_handler("order.created", recorder)
    event = _Named("order.created", "o1")
    bus.publish(event)
    assert recorder.seen == [event]


def test_publish_skips_handlers_of_other_names():
    bus = EventBus()
    recorder = _Recorder()
    bus.register_handler("order.paid", recorder)
    bus.publish(_Named("order.created"))
    assert recorder.seen == []


def test_every_handler_of_a_name_is_called():
    bus = EventBus()
    recorders = [_Recorder(), _Recorder(), _Recorder()]
    for recorder in recorders:
        bus.register_handler("order.created", recorder)
    event = _Named("order.created")
    bus.publish(event)
    assert [r.seen for r in recorders] == [[event]] * 3


def test_same_handler_registered_twice_runs_twice():
    bus = EventBus()
    recorder = _Recorder()
    bus.register_handler("x", recorder)
    bus.register_handler("x", recorder)
    bus.publish(_Named("x"))
    assert len(recorder.seen) == 2


def test_failing_handler_does_not_stop_others():
    bus = EventBus()
    recorder = _Recorder()
    bus.register_handler("x", _Exploding())
    bus.register_handler("x", recorder)
    event = _Named("x")
    assert bus.publish(event) is None
    assert recorder.seen == [event]


def test_handlers_run_concurrently():
    bus = EventBus()
    barrier = threading.Barrier(2, timeout=5)
    first, second = _BarrierHandler(barrier), _BarrierHandler(barrier)
    bus.register_handler("x", first)
    bus.register_handler("x", second)
    bus.publish(_Named("x"))
    assert first.passed and second.passed