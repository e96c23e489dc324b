import unittest

import pytest

from mergebind import Container, UnregisteredTypeError, empty_container, factory, singleton


class Inner: ...


class Outer:
    def __init__(self, inner1: Inner, inner2: Inner):
        self.inner1 = inner1
        self.inner2 = inner2


class Wrapper:
    def __init__(self, outer: Outer):
        self.outer = outer


def wire(inner_registration: Container) -> Container:
    # Registered dependants first, dependencies last.
    container = empty_container()
    container += factory(Wrapper, lambda c: Wrapper(c.resolve(Outer)))
    container += factory(Outer, lambda c: Outer(c.resolve(Inner), c.resolve(Inner)))
    container += inner_registration
    return container


class TestOutOfOrderRegistration(unittest.TestCase):
    def test_factory_inner_builds_independent_instances(self):
        container = wire(factory(Inner))

        wrapper = container.resolve(Wrapper)

        assert isinstance(wrapper.outer, Outer)
        assert isinstance(wrapper.outer.inner1, Inner)
        assert isinstance(wrapper.outer.inner2, Inner)
        assert wrapper.outer.inner1 is not wrapper.outer.inner2

    def test_singleton_inner_is_shared_across_branches(self):
        container = wire(singleton(Inner))

        wrapper = container.resolve(Wrapper)

        assert wrapper.outer.inner1 is wrapper.outer.inner2
        assert container.resolve(Wrapper).outer.inner1 is wrapper.outer.inner1

    def test_each_resolve_builds_a_new_factory_tree(self):
        container = wire(factory(Inner))

        first = container.resolve(Wrapper)
        second = container.resolve(Wrapper)

        assert first is not second
        assert first.outer is not second.outer
        assert first.outer.inner1 is not second.outer.inner1

    def test_singleton_outer_keeps_its_factory_inners(self):
        container = (
            factory(Wrapper, lambda c: Wrapper(c.resolve(Outer)))
            + singleton(Outer, lambda c: Outer(c.resolve(Inner), c.resolve(Inner)))
            + factory(Inner)
        )

        first = container.resolve(Wrapper)
        second = container.resolve(Wrapper)

        assert first is not second
        assert first.outer is second.outer
        assert first.outer.inner1 is not first.outer.inner2


def test_dependencies_resolve_through_the_merged_container():
    # Outer is registered in a container that knows nothing about Inner.
    outer_only = factory(Outer, lambda c: Outer(c.resolve(Inner), c.resolve(Inner)))

    with pytest.raises(UnregisteredTypeError) as ctx:
        outer_only.resolve(Outer)
    assert ctx.value.token is Inner

    merged = outer_only + singleton(Inner)
    assert isinstance(merged.resolve(Outer).inner1, Inner)


def test_later_override_of_a_dependency_is_seen_by_earlier_builders():
    class SpecialInner(Inner): ...

    container = wire(factory(Inner)) + factory(Inner, SpecialInner)

    wrapper = container.resolve(Wrapper)

    assert type(wrapper.outer.inner1) is SpecialInner
    assert type(wrapper.outer.inner2) is SpecialInner


def test_self_referential_singleton_recurses():
    class Node: ...

    container = singleton(Node, lambda c: c.resolve(Node))

    with pytest.raises(RecursionError):
        container.resolve(Node)
