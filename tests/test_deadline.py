import time

from fxquote.deadline import Deadline


def test_clamp_never_extends():
    parent = Deadline.after(0.05)
    child = parent.clamp(10)
    assert child == parent


def test_clamp_shrinks_to_budget():
    parent = Deadline.after(10)
    child = parent.clamp(0.1)
    assert child.expires_at < parent.expires_at
    assert child.remaining() <= 0.1


def test_within_without_parent():
    deadline = Deadline.within(0.2)
    assert 0 < deadline.remaining() <= 0.2


def test_expired():
    deadline = Deadline.after(0.01)
    time.sleep(0.02)
    assert deadline.expired
    assert deadline.remaining() == 0.0
