import pytest

from mti.runtime.environment import Environment
from mti.runtime.values import Int, Str


@pytest.fixture
def env():
    return Environment()


def test_global_scope_exists(env):
    assert env.live_scopes() == 1
    env.bind(Environment.GLOBAL, "x", Int(value=1))
    assert env.lookup(Environment.GLOBAL, "x") == Int(value=1)


def test_lookup_walks_to_the_parent(env):
    env.bind(Environment.GLOBAL, "x", Int(value=1))
    child = env.new_scope(Environment.GLOBAL)
    grandchild = env.new_scope(child)

    assert env.lookup(grandchild, "x") == Int(value=1)


def test_inner_binding_shadows_outer(env):
    env.bind(Environment.GLOBAL, "x", Int(value=1))
    child = env.new_scope(Environment.GLOBAL)
    env.bind(child, "x", Str(value="inner"))

    assert env.lookup(child, "x") == Str(value="inner")
    assert env.lookup(Environment.GLOBAL, "x") == Int(value=1)


def test_missing_name_returns_none(env):
    child = env.new_scope(Environment.GLOBAL)
    assert env.lookup(child, "nope") is None


def test_sibling_scopes_do_not_see_each_other(env):
    left = env.new_scope(Environment.GLOBAL)
    right = env.new_scope(Environment.GLOBAL)
    env.bind(left, "x", Int(value=1))

    assert env.lookup(right, "x") is None


def test_dropped_handles_are_reused(env):
    first = env.new_scope(Environment.GLOBAL)
    env.bind(first, "x", Int(value=1))
    env.drop_scope(first)
    assert env.live_scopes() == 1

    second = env.new_scope(Environment.GLOBAL)
    assert second == first
    # The reused scope starts empty.
    assert env.lookup(second, "x") is None


def test_dropped_scope_cannot_be_used(env):
    handle = env.new_scope(Environment.GLOBAL)
    env.drop_scope(handle)

    with pytest.raises(KeyError):
        env.lookup(handle, "x")
    with pytest.raises(KeyError):
        env.drop_scope(handle)
    with pytest.raises(KeyError):
        env.new_scope(handle)


def test_global_scope_cannot_be_dropped(env):
    with pytest.raises(ValueError):
        env.drop_scope(Environment.GLOBAL)
