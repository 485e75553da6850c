"""
SRAM group URNs and the entitlement claims that carry them.

See https://servicedesk.surf.nl/wiki/spaces/IAM/pages/74226142/Attributes+in+SRAM
"""

import re
from typing import Iterable, NamedTuple

from .collaboration import CollaborationRequest

GROUP_URN_PREFIX = "urn:mace:surf.nl:sram:group:"

ENTITLEMENT_PATTERN = re.compile(
    r"^urn:mace:surf\.nl:sram:group:([a-z1-9_]+):([a-z1-9_]+)(?::(conflux-[a-z1-9_]+))?$"
)

class EntitlementMatch(NamedTuple):
    organization: str
    collaboration_name: str
    group_id: str | None = None


def format_group_urn(
    organization: str, collaboration_name: str, group_id: str | None = None
) -> str:
    """
    Format the URN of a collaboration, or of one of its sub-groups if
    `group_id` is given.
    """
    if not group_id:
        return f"{GROUP_URN_PREFIX}{organization}:{collaboration_name}"

    return f"{GROUP_URN_PREFIX}{organization}:{collaboration_name}:{group_id}"


def directory_urn(suffix: str) -> str:
    """
    The directory only reports the part of the URN after the prefix.
    """
    return f"{GROUP_URN_PREFIX}{suffix}"


def parse_entitlement(value: str) -> EntitlementMatch | None:
    """
    Parse a single role claim.

    Returns
    -------
    EntitlementMatch | None
        The organization, collaboration and (optional) sub-group named by the
        claim, or None if the claim is not a Conflux collaboration entitlement.
    """
    match = ENTITLEMENT_PATTERN.match(value)

    if match is None:
        return None

    return EntitlementMatch(
        organization=match.group(1),
        collaboration_name=match.group(2),
        group_id=match.group(3),
    )


def collaborations_from_roles(roles: Iterable[str]) -> list[CollaborationRequest]:
    """
    Collect the collaborations asserted by a set of role claims. Sub-group
    claims are folded into their collaboration; the order in which a
    collaboration is first seen is preserved.
    """
    collaborations: dict[tuple[str, str], list[str]] = {}

    for role in roles:
        entitlement = parse_entitlement(role)

        if entitlement is None:
            continue

        key = (entitlement.organization, entitlement.collaboration_name)
        group_ids = collaborations.setdefault(key, [])

        if entitlement.group_id is not None and entitlement.group_id not in group_ids:
            group_ids.append(entitlement.group_id)

    return [
        CollaborationRequest(
            organization=organization,
            collaboration_name=collaboration_name,
            group_ids=group_ids,
        )
        for (organization, collaboration_name), group_ids in collaborations.items()
    ]


def get_claim_value(claims: Iterable[tuple[str, str]], claim_type: str) -> str | None:
    """
    First value of `claim_type` among `(type, value)` claim pairs.
    """
    return next((value for kind, value in claims if kind == claim_type), None)
