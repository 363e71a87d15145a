import asyncio
import threading

import pytest

from souvy.core.worker import AsyncRunner


@pytest.fixture
def runner():
    r = AsyncRunner()
    yield r
    r.stop()


class FakeWidget:
    """Collects ``after`` callbacks instead of running a Tk loop."""

    def __init__(self):
        self.pending = []

    def after(self, _ms, fn):
        self.pending.append(fn)


async def add(a, b):
    await asyncio.sleep(0)
    return a + b


async def fail():
    raise ValueError("nope")


def test_submit_returns_result(runner):
    assert runner.submit(add(2, 3)).result(timeout=2) == 5


def test_callbacks_run_through_widget(runner):
    widget = FakeWidget()
    results = []
    done = threading.Event()
    future = runner.submit(add(1, 1), widget=widget, on_done=results.append)
    future.add_done_callback(lambda _f: done.set())
    done.wait(timeout=2)
    future.result(timeout=2)
    # callbacks are only queued, the Tk thread runs them
    assert results == []
    for fn in widget.pending:
        fn()
    assert results == [2]


def test_errors_go_to_on_error(runner):
    errors = []
    done = threading.Event()

    def on_error(e):
        errors.append(e)
        done.set()

    runner.submit(fail(), on_error=on_error)
    assert done.wait(timeout=2)
    assert isinstance(errors[0], ValueError)
