from dataclasses import dataclass

import pytest
from pydantic import BaseModel, ConfigDict

from persistence.services.field_accessor import BoolField, resolve_bool_field
from persistence.tests.fakes import Item
from persistence.tests.models import Widget, widget
from shared.exceptions import ConfigurationError, InvalidFieldDescriptor


@dataclass(frozen=True)
class FrozenItem:
    archived: bool = False


class Account:
    def __init__(self) -> None:
        self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    @locked.setter
    def locked(self, value: bool) -> None:
        self._locked = value

    @property
    def active(self) -> bool:
        return not self._locked


class Profile(BaseModel):
    handle: str
    hidden: bool = False


class FrozenProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    hidden: bool = False


# ---------------------------
# Valid descriptors
# ---------------------------

def test_should_build_accessor_for_mapped_boolean_column():
    # GIVEN
    w = widget("A-1")

    # WHEN
    accessor = resolve_bool_field(Widget.is_deleted)
    accessor.set(w, True)

    # THEN
    assert accessor.name == "is_deleted"
    assert accessor.get(w) is True
    assert w.quantity == 0


def test_should_build_accessor_for_dataclass_field():
    item = Item("A")

    accessor = resolve_bool_field("deleted", Item)
    accessor.set(item, True)

    assert item.deleted is True
    assert accessor.get(item) is True


def test_should_build_accessor_for_writable_property():
    account = Account()

    resolve_bool_field("locked", Account).set(account, True)

    assert account.locked is True


def test_should_build_accessor_for_pydantic_field():
    profile = Profile(handle="x")

    resolve_bool_field("hidden", Profile).set(profile, True)

    assert profile.hidden is True
    assert profile.handle == "x"


def test_should_return_explicit_accessor_unchanged():
    accessor = BoolField(name="flag", get=lambda e: e.flag, set=lambda e, v: setattr(e, "flag", v))

    assert resolve_bool_field(accessor) is accessor


def test_should_cache_compiled_accessor_per_field():
    assert resolve_bool_field("deleted", Item) is resolve_bool_field("deleted", Item)
    assert resolve_bool_field(Widget.is_deleted) is resolve_bool_field("is_deleted", Widget)


# ---------------------------
# Invalid descriptors
# ---------------------------

@pytest.mark.parametrize(
    "descriptor, owner",
    [
        (Widget.quantity, None),
        (Widget.sku, None),
        ("missing", Widget),
        ("quantity", Item),
        ("missing", Item),
        ("archived", FrozenItem),
        ("active", Account),
        ("hidden", FrozenProfile),
        ("handle", Profile),
        ("deleted", None),
        (lambda item: item.deleted, Item),
        (42, None),
    ],
)
def test_should_reject_descriptor_that_is_not_a_settable_bool(descriptor, owner):
    with pytest.raises(InvalidFieldDescriptor) as excinfo:
        resolve_bool_field(descriptor, owner)

    assert isinstance(excinfo.value, ConfigurationError)
    assert excinfo.value.reason


def test_should_accept_field_inherited_by_the_entity_type():
    @dataclass
    class BackorderedItem(Item):
        backordered: bool = False

    field = resolve_bool_field("deleted", owner=Item, entity_type=BackorderedItem)
    item = BackorderedItem("A")
    field.set(item, True)

    assert item.deleted is True


def test_should_reject_attribute_name_owned_by_another_type():
    with pytest.raises(InvalidFieldDescriptor, match="belongs to FrozenItem, not to Item"):
        resolve_bool_field("archived", owner=FrozenItem, entity_type=Item)
