"""
Unit tests for the Lifecycle handle.
"""

import copy

import pytest

from redis_stream_sink import ComponentContext, Disposable, Initializable, Lifecycle, make_lifecycle


class Managed:
    def __init__(self):
        self.calls = []

    async def initialize(self, context):
        self.calls.append(("initialize", context.name))

    async def dispose(self):
        self.calls.append(("dispose",))

    def hello(self):
        return "hi"


class Plain:
    value = 42


def test_protocols():
    assert isinstance(Managed(), Initializable)
    assert isinstance(Managed(), Disposable)
    assert not isinstance(Plain(), Initializable)


@pytest.mark.asyncio
async def test_initialize_and_dispose_once():
    comp = Managed()
    handle = make_lifecycle(comp)

    await handle.initialize(ComponentContext(name="ctx"))
    await handle.initialize(ComponentContext(name="ctx"))
    await handle.dispose()
    await handle.dispose()

    assert comp.calls == [("initialize", "ctx"), ("dispose",)]
    assert handle.initialized is True


@pytest.mark.asyncio
async def test_plain_component_is_accepted():
    handle = make_lifecycle(Plain())
    await handle.initialize(ComponentContext())
    await handle.dispose()
    assert handle.value == 42


def test_attribute_forwarding():
    handle = make_lifecycle(Managed())
    assert handle.hello() == "hi"
    assert isinstance(handle.component, Managed)


def test_make_lifecycle_does_not_rewrap():
    handle = Lifecycle(Managed())
    assert make_lifecycle(handle) is handle


def test_copy_of_handle():
    """Copying a handle rebuilds it without recursing through forwarding."""
    handle = make_lifecycle(Managed())
    clone = copy.copy(handle)
    assert clone.component is handle.component
    assert clone.hello() == "hi"


def test_missing_component_attribute_raises():
    handle = Lifecycle.__new__(Lifecycle)
    with pytest.raises(AttributeError):
        handle.hello
