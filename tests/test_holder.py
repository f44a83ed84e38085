import threading

import pytest

from tierconf.core.errors import ConfigValidationError
from tierconf.core.holder import ConfigHolder
from tierconf.core.schema import define, number


SCHEMA = define(server={"LOW": number()}, shared={"HIGH": number()})


class _Source:
    def __init__(self, values):
        self.values = values
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return dict(self.values)


def test_current_before_load_raises():
    holder = ConfigHolder(SCHEMA, _Source({}))
    with pytest.raises(RuntimeError):
        holder.current
    assert holder.generation == 0
    assert holder.loaded_at is None


def test_load_and_reload_swap_configuration():
    source = _Source({"LOW": "1", "HIGH": "2"})
    holder = ConfigHolder(SCHEMA, source)

    first = holder.load()
    assert holder.current is first
    assert holder.generation == 1

    source.values = {"LOW": "10", "HIGH": "20"}
    second = holder.reload()

    assert holder.current is second
    assert holder.generation == 2
    assert first.server["LOW"] == 1
    assert second.server["LOW"] == 10
    assert source.calls == 2


def test_failed_reload_keeps_previous_configuration():
    source = _Source({"LOW": "1", "HIGH": "2"})
    holder = ConfigHolder(SCHEMA, source)
    first = holder.load()

    source.values = {"LOW": "oops"}
    with pytest.raises(ConfigValidationError) as exc_info:
        holder.reload()

    assert exc_info.value.keys == ("LOW", "HIGH")
    assert holder.current is first
    assert holder.generation == 1


def test_readers_never_observe_a_mixed_configuration():
    counter = {"n": 0}

    def loader():
        counter["n"] += 1
        return {"LOW": str(counter["n"]), "HIGH": str(counter["n"])}

    holder = ConfigHolder(SCHEMA, loader)
    holder.load()
    mismatches = []
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            config = holder.current
            if config.server["LOW"] != config.server["HIGH"]:
                mismatches.append(config)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for _ in range(200):
        holder.reload()
    stop.set()
    for thread in threads:
        thread.join()

    assert mismatches == []
    assert holder.generation == 201


def test_reload_while_loading_is_skipped():
    nested = []

    def loader():
        if len(nested) == 0 and holder.generation == 1:
            nested.append(holder.reload())
        return {"LOW": "1", "HIGH": "2"}

    holder = ConfigHolder(SCHEMA, loader)
    holder.load()

    done = threading.Event()
    worker = threading.Thread(target=lambda: (holder.reload(), done.set()), daemon=True)
    worker.start()

    assert done.wait(5), "reload blocked on a reload already in progress"
    worker.join()
    assert nested == [None]
    assert holder.generation == 2
