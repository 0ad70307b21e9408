"""
Capability lookup.

Administrative calls are authorized by owning a capability object
(``AdminCap<T>`` for a pool, ``WeightHookAdminCap<T>`` for its weight
hook). This module finds that object for an owner.

Rules:
    - The owner's objects are filtered by exact struct type (addresses
      inside the type normalized) and every page is read, so the choice
      does not depend on page order.
    - No match raises CapabilityNotFound.
    - Several matches: the smallest object id wins (numeric order of the
      hex id). The protocol does not say what several caps mean, so the
      rule is only there to make the choice repeatable; it is logged.
"""

from __future__ import annotations

from springsui.errors import CapabilityNotFound
from springsui.ledger.client import LedgerClient, ObjectData
from springsui.log import get_logger
from springsui.types import CapabilityRef, PoolDescriptor, normalize_address, normalize_type

logger = get_logger(__name__)

# Page size for owned-object queries; the ledger caps it at 50.
OWNED_OBJECTS_PAGE_SIZE = 50


def admin_cap_type(package_id: str, token_type: str) -> str:
    return normalize_type(
        f"{normalize_address(package_id)}::liquid_staking::AdminCap<{token_type}>"
    )


def weight_hook_admin_cap_type(package_id: str, token_type: str) -> str:
    return normalize_type(
        f"{normalize_address(package_id)}::weight::WeightHookAdminCap<{token_type}>"
    )


def _owned_matches(
    client: LedgerClient, owner: str, capability_type: str
) -> list[ObjectData]:
    matches: list[ObjectData] = []
    cursor: str | None = None
    while True:
        page = client.get_owned_objects(
            owner, capability_type, cursor=cursor, limit=OWNED_OBJECTS_PAGE_SIZE
        )
        # Filter again locally; some nodes treat the filter loosely.
        matches.extend(
            o for o in page.data if o.type is None or normalize_type(o.type) == capability_type
        )
        if not page.has_next_page or page.next_cursor is None:
            return matches
        cursor = page.next_cursor


def find_capability(
    client: LedgerClient, owner: str, capability_type: str
) -> CapabilityRef:
    """Locate the capability object of ``capability_type`` owned by ``owner``.

    Args:
        client: Ledger client used for the read-only owned-object query.
        owner: Address of the signing identity.
        capability_type: Fully qualified struct type of the capability.

    Returns:
        CapabilityRef of the chosen object.

    Raises:
        CapabilityNotFound: If ``owner`` owns no such object.
    """
    owner = normalize_address(owner)
    capability_type = normalize_type(capability_type)
    matches = _owned_matches(client, owner, capability_type)

    if not matches:
        raise CapabilityNotFound(
            f"{owner} owns no {capability_type}",
            details={"owner": owner, "capability_type": capability_type},
        )

    matches.sort(key=lambda o: int(o.object_id, 16))
    if len(matches) > 1:
        logger.warning(
            "%s owns %d objects of %s; using %s",
            owner,
            len(matches),
            capability_type,
            matches[0].object_id,
        )

    chosen = matches[0]
    return CapabilityRef(
        object_id=chosen.object_id,
        object_type=capability_type,
        version=chosen.version,
        digest=chosen.digest,
    )


def find_admin_cap(
    client: LedgerClient, owner: str, package_id: str, pool: PoolDescriptor
) -> CapabilityRef:
    return find_capability(client, owner, admin_cap_type(package_id, pool.token_type))


def find_weight_hook_admin_cap(
    client: LedgerClient, owner: str, package_id: str, pool: PoolDescriptor
) -> CapabilityRef:
    return find_capability(
        client, owner, weight_hook_admin_cap_type(package_id, pool.token_type)
    )
