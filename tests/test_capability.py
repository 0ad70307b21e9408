"""
Tests for capability lookup.

Uses a FakeClient that serves owned-object pages from memory.

Test plan:
- No match raises CapabilityNotFound with owner and type in details
- One match returned as a CapabilityRef with version and digest
- Several matches: smallest object id wins regardless of page order,
  and a warning is logged
- Pagination: every page is read, cursor forwarded
- Type filter: objects of another type are ignored even if the node
  returns them
- Admin and weight-hook helpers build the expected struct types
- Short addresses inside a token type match the node's full-length form
"""

from typing import Any

import pytest

from springsui.capability import (
    OWNED_OBJECTS_PAGE_SIZE,
    admin_cap_type,
    find_admin_cap,
    find_capability,
    find_weight_hook_admin_cap,
    weight_hook_admin_cap_type,
)
from springsui.errors import CapabilityNotFound
from springsui.ledger.client import ObjectData, OwnedObjectsPage
from springsui.types import PoolDescriptor, normalize_type

PACKAGE = "0x" + "ab" * 32
TOKEN = "0x" + "22" * 32 + "::ripleys::RIPLEYS"
OWNER = "0x" + "33" * 32
POOL = PoolDescriptor(id="0x" + "11" * 32, token_type=TOKEN)
CAP_TYPE = f"{PACKAGE}::liquid_staking::AdminCap<{TOKEN}>"
SUI_FRAMEWORK = "0x" + "0" * 63 + "2"


def _obj(object_id: str, object_type: str = CAP_TYPE) -> ObjectData:
    return ObjectData(object_id=object_id, version="7", digest="dig", type=object_type)


# ---------------------------------------------------------------------------
# Fake client
# ---------------------------------------------------------------------------


class FakeClient:
    """Serves pre-built owned-object pages, one per call."""

    def __init__(self, pages: list[OwnedObjectsPage]) -> None:
        self._pages = pages
        self.calls: list[dict[str, Any]] = []

    def get_owned_objects(
        self,
        owner: str,
        struct_type: str,
        *,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> OwnedObjectsPage:
        self.calls.append(
            {"owner": owner, "struct_type": struct_type, "cursor": cursor, "limit": limit}
        )
        return self._pages[len(self.calls) - 1]


def _single_page(*objects: ObjectData) -> FakeClient:
    return FakeClient([OwnedObjectsPage(data=tuple(objects))])


# ---------------------------------------------------------------------------
# find_capability
# ---------------------------------------------------------------------------


class TestNoMatch:
    def test_raises_capability_not_found(self) -> None:
        with pytest.raises(CapabilityNotFound) as exc_info:
            find_capability(_single_page(), OWNER, CAP_TYPE)
        assert exc_info.value.error_code == "CAPABILITY_NOT_FOUND"
        assert exc_info.value.details == {"owner": OWNER, "capability_type": CAP_TYPE}

    def test_other_types_ignored(self) -> None:
        client = _single_page(_obj("0x01", object_type=f"{PACKAGE}::other::Thing"))
        with pytest.raises(CapabilityNotFound):
            find_capability(client, OWNER, CAP_TYPE)


class TestSingleMatch:
    def test_returns_ref(self) -> None:
        ref = find_capability(_single_page(_obj("0x0a")), OWNER, CAP_TYPE)
        assert ref.object_id == "0x0a"
        assert ref.object_type == CAP_TYPE
        assert ref.version == "7"
        assert ref.digest == "dig"

    def test_query_arguments(self) -> None:
        client = _single_page(_obj("0x0a"))
        find_capability(client, "0x33", CAP_TYPE)
        (call,) = client.calls
        assert call["owner"] == "0x" + "0" * 62 + "33"
        assert call["struct_type"] == CAP_TYPE
        assert call["cursor"] is None
        assert call["limit"] == OWNED_OBJECTS_PAGE_SIZE

    def test_untyped_objects_accepted(self) -> None:
        # Some nodes omit the type when the filter already matched.
        client = _single_page(ObjectData(object_id="0x0a"))
        assert find_capability(client, OWNER, CAP_TYPE).object_id == "0x0a"


class TestSeveralMatches:
    def test_smallest_id_wins(self) -> None:
        client = _single_page(_obj("0x0c"), _obj("0x0a"), _obj("0x0b"))
        assert find_capability(client, OWNER, CAP_TYPE).object_id == "0x0a"

    def test_numeric_not_lexical_order(self) -> None:
        client = _single_page(_obj("0x" + "0" * 62 + "ff"), _obj("0x100"))
        ref = find_capability(client, OWNER, CAP_TYPE)
        assert ref.object_id == "0x" + "0" * 62 + "ff"

    def test_choice_independent_of_page_order(self) -> None:
        first = FakeClient(
            [
                OwnedObjectsPage(data=(_obj("0x0b"),), next_cursor="c1", has_next_page=True),
                OwnedObjectsPage(data=(_obj("0x0a"),)),
            ]
        )
        second = FakeClient(
            [
                OwnedObjectsPage(data=(_obj("0x0a"),), next_cursor="c1", has_next_page=True),
                OwnedObjectsPage(data=(_obj("0x0b"),)),
            ]
        )
        assert (
            find_capability(first, OWNER, CAP_TYPE).object_id
            == find_capability(second, OWNER, CAP_TYPE).object_id
            == "0x0a"
        )

    def test_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level("WARNING", logger="springsui")
        find_capability(_single_page(_obj("0x0b"), _obj("0x0a")), OWNER, CAP_TYPE)
        assert "owns 2 objects" in caplog.text
        assert "0x0a" in caplog.text


class TestPagination:
    def test_reads_every_page(self) -> None:
        client = FakeClient(
            [
                OwnedObjectsPage(data=(), next_cursor="c1", has_next_page=True),
                OwnedObjectsPage(data=(), next_cursor="c2", has_next_page=True),
                OwnedObjectsPage(data=(_obj("0x0a"),)),
            ]
        )
        ref = find_capability(client, OWNER, CAP_TYPE)
        assert ref.object_id == "0x0a"
        assert [c["cursor"] for c in client.calls] == [None, "c1", "c2"]

    def test_stops_without_cursor(self) -> None:
        client = FakeClient(
            [OwnedObjectsPage(data=(_obj("0x0a"),), next_cursor=None, has_next_page=True)]
        )
        find_capability(client, OWNER, CAP_TYPE)
        assert len(client.calls) == 1


# ---------------------------------------------------------------------------
# Typed helpers
# ---------------------------------------------------------------------------


class TestTypedHelpers:
    def test_admin_cap_type(self) -> None:
        assert admin_cap_type(PACKAGE, TOKEN) == CAP_TYPE

    def test_package_id_normalized_in_type(self) -> None:
        assert admin_cap_type("0x2", TOKEN).startswith("0x" + "0" * 63 + "2::")

    def test_weight_hook_admin_cap_type(self) -> None:
        assert weight_hook_admin_cap_type(PACKAGE, TOKEN) == (
            f"{PACKAGE}::weight::WeightHookAdminCap<{TOKEN}>"
        )

    def test_find_admin_cap(self) -> None:
        client = _single_page(_obj("0x0a"))
        assert find_admin_cap(client, OWNER, PACKAGE, POOL).object_id == "0x0a"
        assert client.calls[0]["struct_type"] == CAP_TYPE

    def test_find_weight_hook_admin_cap(self) -> None:
        hook_type = weight_hook_admin_cap_type(PACKAGE, TOKEN)
        client = _single_page(_obj("0x0d", object_type=hook_type))
        assert find_weight_hook_admin_cap(client, OWNER, PACKAGE, POOL).object_id == "0x0d"
        assert client.calls[0]["struct_type"] == hook_type

    def test_short_token_type_matches_full_length_object(self) -> None:
        short_pool = PoolDescriptor(id=POOL.id, token_type="0x22::ripleys::RIPLEYS")
        full_type = admin_cap_type(PACKAGE, "0x" + "0" * 62 + "22::ripleys::RIPLEYS")
        client = _single_page(_obj("0x0a", object_type=full_type))
        assert find_admin_cap(client, OWNER, PACKAGE, short_pool).object_id == "0x0a"
        assert client.calls[0]["struct_type"] == full_type


class TestNormalizeType:
    def test_nested_addresses_padded(self) -> None:
        assert normalize_type("0x2::coin::Coin<0x2::sui::SUI>") == (
            f"{SUI_FRAMEWORK}::coin::Coin<{SUI_FRAMEWORK}::sui::SUI>"
        )

    def test_full_length_unchanged(self) -> None:
        assert normalize_type(CAP_TYPE) == CAP_TYPE

    def test_module_and_struct_names_untouched(self) -> None:
        assert normalize_type("0xA::oxab::Ox0<u64>") == "0x" + "0" * 63 + "a::oxab::Ox0<u64>"
