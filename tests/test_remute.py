"""Tests for Remute.apply: reconstruction along member paths."""
import uuid

import pytest

from remute import (
    ConstructorAmbiguityError,
    NullArgumentError,
    PropertyBindingError,
    Remute,
    UnassignablePropertyError,
    UnsupportedPathError,
)
from models import (
    Department,
    Employee,
    InvalidMultipleConstructor,
    InvalidProperty,
    Ledger,
    Organization,
    PropertyMismatch,
    PropertyMismatchContainer,
    StaticFieldInit,
    Tagged,
    Temperature,
)


class TestArguments:
    """Missing arguments are rejected before any work."""

    def test_none_root(self, engine):
        with pytest.raises(NullArgumentError) as exc_info:
            engine.apply(None, lambda o: o.name, 'organization')
        assert exc_info.value.argument_name == 'root'

    def test_none_path(self, engine):
        organization = Organization(None, None)
        with pytest.raises(NullArgumentError) as exc_info:
            engine.apply(organization, None, 'organization')
        assert exc_info.value.argument_name == 'path'

    def test_null_argument_is_type_error(self, engine):
        with pytest.raises(TypeError):
            engine.apply(None, 'name', 'organization')


class TestMemberPaths:

    def test_first_level_property(self, engine):
        organization = Organization('org1', Department('d1', None, None))

        actual = engine.apply(organization, 'name', 'org2')

        assert actual.name == 'org2'
        assert actual is not organization
        assert actual.dept is organization.dept

    def test_nested_property(self, engine, organization):
        actual = engine.apply(organization, lambda o: o.dept.manager.first_name, 'Foo')

        assert actual.dept.manager.first_name == 'Foo'
        assert actual.dept.manager.id == organization.dept.manager.id
        assert actual is not organization
        assert actual.dept is not organization.dept
        assert actual.dept.manager is not organization.dept.manager
        assert actual.name is organization.name
        assert actual.dept.title is organization.dept.title
        # Original untouched
        assert organization.dept.manager.first_name == 'developer'

    def test_string_and_lambda_paths_agree(self, engine, organization):
        by_text = engine.apply(organization, 'dept.manager.last_name', 'Bar')
        by_lambda = engine.apply(organization, lambda o: o.dept.manager.last_name, 'Bar')

        assert by_text.dept.manager.last_name == by_lambda.dept.manager.last_name == 'Bar'

    def test_value_type_property(self, engine):
        employee = Employee(uuid.uuid4(), 'Joe', 'Doe')
        new_id = uuid.uuid4()

        actual = engine.apply(employee, lambda e: e.id, new_id)

        assert actual.id == new_id
        assert actual.first_name is employee.first_name
        assert actual.last_name is employee.last_name

    def test_with_alias(self, engine, organization):
        actual = engine.with_(organization, 'name', 'organization 2')
        assert actual.name == 'organization 2'

    def test_empty_path_replaces_root(self, engine, organization):
        replacement = Organization('other', None)
        assert engine.apply(organization, '', replacement) is replacement
        assert engine.apply(organization, lambda o: o, replacement) is replacement

    def test_keyword_only_parameter(self, engine):
        tagged = Tagged('name', tag='old')

        actual = engine.apply(tagged, 'tag', 'new')

        assert actual.tag == 'new'
        assert actual.name == 'name'

    def test_case_insensitive_binding(self, engine):
        actual = engine.apply(Temperature(20), 'Celsius', 25)
        assert actual.Celsius == 25

    def test_static_field_init(self, engine):
        instance = StaticFieldInit('value')

        actual = engine.apply(instance, 'property1', 'updated')

        assert actual.property1 == 'updated'
        assert StaticFieldInit.DEFAULT.property1 == 'Default'

    def test_through_none_member(self, engine):
        organization = Organization('org1', Department('d1', None, None))
        with pytest.raises(AttributeError):
            engine.apply(organization, 'dept.manager.first_name', 'Foo')


class TestShortCircuit:
    """Setting the current value returns the original root."""

    def test_equal_nested_value(self, engine, organization):
        same_id = uuid.UUID(str(organization.dept.manager.id))

        actual = engine.apply(organization, 'dept.manager.id', same_id)

        assert actual is organization

    def test_equal_first_level_value(self, engine, organization):
        assert engine.apply(organization, 'name', 'organization 1') is organization

    def test_no_notification(self, engine, organization, recorded_changes):
        engine.apply(organization, 'name', organization.name)
        assert recorded_changes == []


class TestFailures:

    def test_constructor_ambiguity(self, engine):
        with pytest.raises(ConstructorAmbiguityError) as exc_info:
            engine.apply(InvalidMultipleConstructor('value'), lambda x: x.property1, 'test')

        assert str(exc_info.value) == (
            "Unable to find appropriate constructor of type 'InvalidMultipleConstructor'. "
            "Consider to use ActivationConfiguration parameter."
        )
        assert exc_info.value.type_name == 'InvalidMultipleConstructor'

    def test_property_binding(self, engine):
        with pytest.raises(PropertyBindingError) as exc_info:
            engine.apply(InvalidProperty('property'), lambda x: x.property1, 'test')

        assert str(exc_info.value) == (
            "Unable to find appropriate property to use as a constructor parameter 'property'. "
            "Type 'InvalidProperty'. Consider to use ActivationConfiguration parameter."
        )

    def test_class_attribute_is_not_a_property(self, engine):
        with pytest.raises(UnsupportedPathError) as exc_info:
            engine.apply(InvalidProperty('property'), lambda x: x.field1, 'test')

        assert str(exc_info.value) == "Type member 'field1' is expected to be a property."

    def test_method_is_not_a_property(self, engine):
        with pytest.raises(UnsupportedPathError):
            engine.apply(Employee(uuid.uuid4(), 'Joe', 'Doe'), 'full_name', 'test')

    def test_computed_property(self, engine):
        with pytest.raises(UnassignablePropertyError) as exc_info:
            engine.apply(PropertyMismatch('user1'), lambda x: x.nick_name, 'user2')

        assert str(exc_info.value) == (
            "Unable to construct object of type 'PropertyMismatch'. "
            "There is no constructor parameter matching property 'nick_name'."
        )
        assert exc_info.value.property_name == 'nick_name'
        assert exc_info.value.type_name == 'PropertyMismatch'

    def test_nested_computed_property(self, engine):
        container = PropertyMismatchContainer(PropertyMismatch('user1'))

        with pytest.raises(UnassignablePropertyError) as exc_info:
            engine.apply(container, lambda x: x.property_mismatch.nick_name, 'user2')

        assert exc_info.value.type_name == 'PropertyMismatch'

    def test_failures_do_not_touch_inputs(self, engine):
        items = [PropertyMismatch('user1')]
        holder = Department('d1', None, items)

        with pytest.raises(UnassignablePropertyError):
            engine.apply(holder, 'employees[0].nick_name', 'user2')

        assert holder.employees is items
        assert items[0].user_name == 'user1'

    def test_constructor_failure_restores_collections(self, engine):
        entries = [1, 2, 3]
        ledger = Ledger(entries)

        with pytest.raises(ValueError):
            engine.apply(ledger, 'entries[1]', -5)

        assert ledger.entries is entries
        assert entries == [1, 2, 3]

    def test_constructor_failure_restores_nested_collections(self, engine):
        inner = [1, 2]
        holder = Department('d1', None, [Ledger(inner)])

        with pytest.raises(ValueError):
            engine.apply(holder, 'employees[0].entries[0]', -1)

        assert inner == [1, 2]

    def test_member_checked_when_earlier_walk_stopped_at_none(self, engine, organization):
        vacant = Organization('organization 2', Department('department 2', None, None))

        with pytest.raises(AttributeError):
            engine.apply(vacant, 'dept.manager.full_name', 'test')

        with pytest.raises(UnsupportedPathError):
            engine.apply(organization, 'dept.manager.full_name', 'test')

        assert organization.dept.manager.first_name == 'developer'


def test_engines_do_not_share_caches(organization):
    first = Remute()
    second = Remute()

    first.apply(organization, 'name', 'a')

    assert len(first._resolver._strategies) == 1
    assert len(second._resolver._strategies) == 0
