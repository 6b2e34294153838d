"""Tests for the reference Container.

Tests:
- bind/get for classes, factories, constants
- transient vs singleton scopes
- activation pipeline: user handlers then container-wide stages
- errors: unbound, duplicate, incomplete bindings
"""

from unittest.mock import MagicMock

import pytest

from ditrace.domain.exceptions import IncompleteBindingError, ServiceAlreadyBoundError, ServiceNotFoundError
from ditrace.domain.ports.container import ActivationContext
from ditrace.infrastructure.container import Container, Scope
from tests.factories import NotTracedTestObject, TestObject


class TestBindAndGet:
    """Tests for bindings and resolution."""

    def test_to_class_constructs_instance(self) -> None:
        """to(cls) constructs cls()."""
        container = Container()
        container.bind("TestObject").to(TestObject)

        assert isinstance(container.get("TestObject"), TestObject)

    def test_class_key(self) -> None:
        """Classes work as keys."""
        container = Container()
        container.bind(TestObject).to(TestObject)

        assert isinstance(container.get(TestObject), TestObject)

    def test_to_factory_receives_container(self) -> None:
        """Factory is called with the container."""
        container = Container()
        container.bind("dep").to_constant(7)
        container.bind("svc").to_factory(lambda c: ("svc", c.get("dep")))

        assert container.get("svc") == ("svc", 7)

    def test_to_rejects_non_class(self) -> None:
        """to() requires a class."""
        with pytest.raises(TypeError, match="class"):
            Container().bind("x").to(TestObject())  # type: ignore[arg-type]

    def test_to_factory_rejects_non_callable(self) -> None:
        """to_factory() requires a callable."""
        with pytest.raises(TypeError, match="callable"):
            Container().bind("x").to_factory(42)  # type: ignore[arg-type]

    def test_is_bound_and_unbind(self) -> None:
        """unbind removes binding."""
        container = Container()
        container.bind("x").to(TestObject)
        assert container.is_bound("x") is True

        container.unbind("x")
        assert container.is_bound("x") is False

    def test_bindings_in_registration_order(self) -> None:
        """bindings() enumerates in registration order."""
        container = Container()
        container.bind("a").to(TestObject)
        container.bind("b").to(NotTracedTestObject)

        assert [b.key for b in container.bindings()] == ["a", "b"]


class TestScopes:
    """Tests for transient and singleton scopes."""

    def test_transient_returns_new_instances(self) -> None:
        """Default scope is transient."""
        container = Container()
        binding = container.bind("x").to(TestObject)

        assert binding.scope is Scope.TRANSIENT
        assert container.get("x") is not container.get("x")

    def test_singleton_returns_same_instance(self) -> None:
        """Singleton scope caches first activation."""
        container = Container()
        container.bind("x").to(TestObject).in_singleton_scope()

        assert container.get("x") is container.get("x")

    def test_constant_is_singleton(self) -> None:
        """to_constant hands out the same value."""
        value = TestObject()
        container = Container()
        binding = container.bind("x").to_constant(value)

        assert binding.scope is Scope.SINGLETON
        assert container.get("x") is value

    def test_in_transient_scope_resets(self) -> None:
        """in_transient_scope() after in_singleton_scope() wins."""
        container = Container()
        container.bind("x").to(TestObject).in_singleton_scope().in_transient_scope()

        assert container.get("x") is not container.get("x")


class TestActivationPipeline:
    """Tests for activation handlers and stages."""

    def test_handler_called_once_per_activation(self) -> None:
        """Transient: handler runs on every get()."""
        handler = MagicMock(side_effect=lambda _ctx, obj: obj)
        container = Container()
        container.bind("x").to(TestObject).on_activation(handler)

        container.get("x")
        container.get("x")

        assert handler.call_count == 2

    def test_singleton_handler_called_once(self) -> None:
        """Singleton: handler runs once."""
        handler = MagicMock(side_effect=lambda _ctx, obj: obj)
        container = Container()
        container.bind("x").to(TestObject).in_singleton_scope().on_activation(handler)

        container.get("x")
        container.get("x")

        handler.assert_called_once()

    def test_handler_receives_context(self) -> None:
        """Handler gets ActivationContext with key and container."""
        handler = MagicMock(side_effect=lambda _ctx, obj: obj)
        container = Container()
        container.bind("x").to(TestObject).on_activation(handler)

        container.get("x")

        context = handler.call_args.args[0]
        assert context == ActivationContext(key="x", container=container)

    def test_handler_result_replaces_instance(self) -> None:
        """Handler return value is what get() returns."""
        replacement = NotTracedTestObject()
        container = Container()
        container.bind("x").to(TestObject).on_activation(lambda _ctx, _obj: replacement)

        assert container.get("x") is replacement

    def test_stages_run_after_handlers_in_order(self) -> None:
        """Pipeline order: user handlers, then container stages."""
        order: list[str] = []

        def make_stage(label: str):  # noqa: ANN202
            def stage(_ctx: ActivationContext, obj: object) -> object:
                order.append(label)
                return obj

            return stage

        container = Container()
        container.bind("x").to(TestObject).on_activation(make_stage("handler"))
        container.add_activation_stage(make_stage("stage-1"))
        container.add_activation_stage(make_stage("stage-2"))

        container.get("x")

        assert order == ["handler", "stage-1", "stage-2"]

    def test_stage_applies_to_future_bindings(self) -> None:
        """Stage registered before bind() still runs."""
        stage = MagicMock(side_effect=lambda _ctx, obj: obj)
        container = Container()
        container.add_activation_stage(stage)
        container.bind("x").to(TestObject)

        container.get("x")

        stage.assert_called_once()

    def test_on_activation_rejects_non_callable(self) -> None:
        """on_activation() requires a callable."""
        with pytest.raises(TypeError, match="callable"):
            Container().bind("x").to(TestObject).on_activation("nope")  # type: ignore[arg-type]


class TestErrors:
    """Tests for container errors."""

    def test_get_unbound_raises(self) -> None:
        """get() of unknown key raises ServiceNotFoundError."""
        with pytest.raises(ServiceNotFoundError, match="service not bound: missing"):
            Container().get("missing")

    def test_unbind_unbound_raises(self) -> None:
        """unbind() of unknown key raises ServiceNotFoundError."""
        with pytest.raises(ServiceNotFoundError):
            Container().unbind("missing")

    def test_duplicate_bind_raises(self) -> None:
        """Binding the same key twice raises."""
        container = Container()
        container.bind(TestObject).to(TestObject)

        with pytest.raises(ServiceAlreadyBoundError, match="TestObject"):
            container.bind(TestObject)

    def test_binding_without_target_raises(self) -> None:
        """get() before to*() raises IncompleteBindingError."""
        container = Container()
        container.bind("x")

        with pytest.raises(IncompleteBindingError, match="no target"):
            container.get("x")

    def test_not_found_is_key_error(self) -> None:
        """ServiceNotFoundError is a KeyError."""
        assert issubclass(ServiceNotFoundError, KeyError)
