from conftest import FakeClock
from octo.ext.commands import CooldownStore, ReplyCache
from octo.models import Message


def test_cooldown_window():
    clock = FakeClock()
    store = CooldownStore(clock=clock)

    assert store.check("u1", "ping", 5) == (True, 0)
    clock.now += 2
    assert store.check("u1", "ping", 5) == (False, 3)
    clock.now += 4
    assert store.check("u1", "ping", 5) == (True, 0)


def test_denied_use_does_not_restamp():
    clock = FakeClock()
    store = CooldownStore(clock=clock)
    store.check("u1", "ping", 5)
    clock.now += 4.5
    assert store.check("u1", "ping", 5) == (False, 1)
    clock.now += 0.5
    assert store.check("u1", "ping", 5) == (True, 0)


def test_zero_cooldown_never_records():
    store = CooldownStore(clock=FakeClock())
    for _ in range(3):
        assert store.check("u1", "ping", 0) == (True, 0)
    assert len(store) == 0


def test_cooldowns_are_per_user_and_command():
    store = CooldownStore(clock=FakeClock())
    assert store.check("u1", "ping", 10)[0]
    assert store.check("u2", "ping", 10)[0]
    assert store.check("u1", "help", 10)[0]
    assert not store.check("u1", "ping", 10)[0]
    assert len(store) == 3


def test_clear_and_reset():
    store = CooldownStore(clock=FakeClock())
    store.check("u1", "ping", 10)
    store.check("u1", "help", 10)
    store.check("u2", "ping", 10)

    store.reset("u1", "ping")
    assert store.check("u1", "ping", 10)[0]

    assert store.clear() == 3
    assert len(store) == 0
    assert store.check("u2", "ping", 10)[0]


def test_reply_cache():
    cache = ReplyCache()
    reply = Message(id="2", channel_id="c", content="pong")
    cache.set("1", reply)

    assert "1" in cache
    assert cache.get("1") is reply
    assert len(cache) == 1
    assert cache.pop("1") is reply
    assert cache.get("1") is None

    cache.set("3", reply)
    assert cache.clear() == 1
    assert len(cache) == 0
