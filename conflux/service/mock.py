"""
The development group directory, used when SRAM is disabled and for testing.
"""

from datetime import datetime, timezone

from conflux.core.scim import (
    ScimGroup,
    ScimGroupInfo,
    ScimLink,
    ScimMember,
    ScimMeta,
)

from .directory import GroupDirectory

DEVELOPMENT_MEMBER = ScimMember(
    display="Development User",
    value="b0ee16ff-6e23-4266-b503-b93a003c1c05@scim.sram.surf.nl",
)


def development_group(
    scim_id: str,
    urn: str,
    display_name: str,
    members: list[ScimMember] | None = None,
    description: str | None = None,
    links: list[ScimLink] | None = None,
) -> ScimGroup:
    """
    Build a directory group record. `urn` is the suffix after the SRAM group
    prefix, as the directory reports it.
    """
    return ScimGroup(
        id=scim_id,
        display_name=display_name,
        external_id=f"external-{scim_id}",
        members=members if members is not None else [],
        meta=ScimMeta(
            created=datetime(2025, 1, 1, tzinfo=timezone.utc),
            resource_type="Group",
            location=f"/Groups/{scim_id}",
        ),
        group_info=ScimGroupInfo(
            urn=urn,
            description=description,
            links=links if links is not None else [],
        ),
    )


def development_groups() -> list[ScimGroup]:
    links = [
        ScimLink(name="sbs_url", value="https://example.com/development"),
        ScimLink(name="logo", value="https://example.com/logo.png"),
    ]

    return [
        development_group(
            scim_id="development",
            urn="surf:development",
            display_name="Development Group",
            description="This is a development group.",
            members=[DEVELOPMENT_MEMBER],
            links=links,
        ),
        development_group(
            scim_id="development-admin",
            urn="surf:development:conflux-cx_project_admin",
            display_name="Project administrators",
            members=[DEVELOPMENT_MEMBER],
        ),
        development_group(
            scim_id="development-user",
            urn="surf:development:conflux-cx_project_user",
            display_name="Project users",
            members=[DEVELOPMENT_MEMBER],
        ),
    ]


class DevelopmentGroupDirectory(GroupDirectory):
    """
    An in-memory directory. Every call is recorded so that tests can check
    how the directory was used.
    """

    groups: dict[str, ScimGroup]
    available: bool
    get_group_calls: list[str]
    list_all_groups_calls: int

    def __init__(self, groups: list[ScimGroup] | None = None, available: bool = True):
        if groups is None:
            groups = development_groups()

        self.groups = {group.id: group for group in groups}
        self.available = available
        self.get_group_calls = []
        self.list_all_groups_calls = 0

    def remove(self, scim_id: str):
        self.groups.pop(scim_id, None)

    async def get_group(self, scim_id: str) -> ScimGroup | None:
        self.get_group_calls.append(scim_id)
        return self.groups.get(scim_id)

    async def list_all_groups(self) -> list[ScimGroup] | None:
        self.list_all_groups_calls += 1

        if not self.available:
            return None

        return list(self.groups.values())
