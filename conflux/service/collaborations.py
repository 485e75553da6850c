"""
Service layer for resolving SRAM collaborations.

A collaboration asserted by the identity provider only carries URNs. The
directory, however, only serves groups by its own id, so we keep a cache of
URN to directory id. When every URN we need is cached the groups are fetched
one by one; as soon as any URN is missing the whole directory is listed and
the cache is rebuilt from that listing.
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from conflux.core.collaboration import (
    Collaboration,
    CollaborationRequest,
    GroupMember,
    GroupRecord,
)
from conflux.core.scim import ScimGroup
from conflux.core.urn import directory_urn, format_group_urn

from . import urn_cache
from .directory import GroupDirectory

URL_LINK_NAME = "sbs_url"
LOGO_LINK_NAME = "logo"


class DirectoryUnavailable(Exception):
    pass


class GroupNotFound(Exception):
    pass


def request_urns(request: CollaborationRequest) -> tuple[str, list[str]]:
    """
    The URN of the collaboration itself and those of its requested
    sub-groups, in request order.
    """
    return (
        format_group_urn(request.organization, request.collaboration_name),
        [
            format_group_urn(request.organization, request.collaboration_name, group_id)
            for group_id in request.group_ids
        ],
    )


def map_scim_group(urn: str, group: ScimGroup) -> GroupRecord:
    """
    Convert a directory group into a GroupRecord.

    Parameters
    ----------
    urn: str
        The full URN the group was requested under.
    group: ScimGroup
        The group as served by the directory.
    """
    return GroupRecord(
        id=group.group_info.urn,
        urn=urn,
        display_name=group.display_name,
        description=group.group_info.description,
        url=group.group_info.link(URL_LINK_NAME),
        logo_url=group.group_info.link(LOGO_LINK_NAME),
        external_id=group.external_id,
        scim_id=group.id,
        created=group.meta.created,
        members=[
            GroupMember(display_name=member.display, scim_id=member.value)
            for member in group.members
        ],
    )


async def resolve(
    requests: list[CollaborationRequest],
    directory: GroupDirectory,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> list[Collaboration]:
    """
    Resolve a batch of collaboration requests against the group directory.

    Parameters
    ----------
    requests: list[CollaborationRequest]
        The collaborations to resolve.
    directory: GroupDirectory
        The group directory.
    conn: AsyncSession
        The database session holding the URN cache. The cache may be replaced
        as part of the caller's transaction.
    log: FilteringBoundLogger
        Logger instance.

    Returns
    -------
    list[Collaboration]
        One collaboration per request, in request order.

    Raises
    ------
    DirectoryUnavailable
        If the cache had to be rebuilt and the directory listing could not be
        obtained.
    GroupNotFound
        If any requested group does not exist in the directory.
    """
    urns = set()

    for request in requests:
        collaboration_urn, group_urns = request_urns(request)
        urns.add(collaboration_urn)
        urns.update(group_urns)

    log = log.bind(number_of_requests=len(requests), number_of_urns=len(urns))

    cached = await urn_cache.find_many(urns, conn=conn)

    if len(cached) < len(urns):
        await log.ainfo(
            "collaboration.resolve.cache_miss",
            missing_urns=sorted(urns - cached.keys()),
        )
        groups = await _groups_from_listing(directory=directory, conn=conn, log=log)
    else:
        await log.adebug("collaboration.resolve.cache_hit")
        groups = await _groups_from_cache(
            cached=cached, directory=directory, log=log
        )

    collaborations = []

    for request in requests:
        collaboration_urn, group_urns = request_urns(request)

        collaborations.append(
            Collaboration(
                organization=request.organization,
                collaboration_group=_mapped(collaboration_urn, groups),
                groups=[_mapped(urn, groups) for urn in group_urns],
            )
        )

    await log.ainfo("collaboration.resolved")

    return collaborations


def _mapped(urn: str, groups: dict[str, ScimGroup]) -> GroupRecord:
    group = groups.get(urn)

    if group is None:
        raise GroupNotFound(f"Group with URN {urn} not found in the directory")

    return map_scim_group(urn, group)


async def _list_directory(
    directory: GroupDirectory, log: FilteringBoundLogger
) -> list[ScimGroup]:
    listing = await directory.list_all_groups()

    # An empty listing is treated like no listing at all; replacing the cache
    # with it would throw away every known group.
    if not listing:
        await log.awarning("collaboration.directory.unavailable")
        raise DirectoryUnavailable("Could not obtain the group listing")

    return listing


async def _groups_from_listing(
    directory: GroupDirectory,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> dict[str, ScimGroup]:
    """
    List the whole directory, replace the cache with the listing and return
    the listing keyed by full URN.
    """
    listing = await _list_directory(directory=directory, log=log)

    groups = {directory_urn(group.group_info.urn): group for group in listing}

    await urn_cache.replace_all(
        ((urn, group.id) for urn, group in groups.items()), conn=conn, log=log
    )

    return groups


async def _groups_from_cache(
    cached: dict[str, str],
    directory: GroupDirectory,
    log: FilteringBoundLogger,
) -> dict[str, ScimGroup]:
    """
    Fetch each cached group from the directory, once per URN. The first
    failing fetch cancels the rest and its exception is raised as is.
    """

    async def fetch(urn: str) -> ScimGroup:
        group = await directory.get_group(cached[urn])

        if group is None:
            await log.ainfo(
                "collaboration.group.not_found", urn=urn, scim_id=cached[urn]
            )
            raise GroupNotFound(
                f"Group with ID {cached[urn]} ({urn}) not found in the directory"
            )

        return group

    try:
        async with asyncio.TaskGroup() as tasks:
            fetched = {urn: tasks.create_task(fetch(urn)) for urn in cached}
    except ExceptionGroup as errors:
        raise errors.exceptions[0]

    return {urn: task.result() for urn, task in fetched.items()}


async def get_group_by_urn(
    urn: str,
    directory: GroupDirectory,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> GroupRecord:
    """
    Read a single group through the cache.

    Raises
    ------
    GroupNotFound
        If the URN is not cached, or the directory no longer has the group.
    """
    log = log.bind(urn=urn)
    scim_id = await urn_cache.find(urn, conn=conn)

    if scim_id is None:
        await log.ainfo("collaboration.group.not_cached")
        raise GroupNotFound(f"Group with URN {urn} not found")

    group = await directory.get_group(scim_id)

    if group is None:
        await log.ainfo("collaboration.group.not_found", scim_id=scim_id)
        raise GroupNotFound(f"Group with ID {scim_id} not found in the directory")

    return map_scim_group(urn, group)


async def refresh_cache(
    directory: GroupDirectory,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> int:
    """
    Rebuild the URN cache from a full directory listing.

    Returns
    -------
    int
        The number of cached groups.

    Raises
    ------
    DirectoryUnavailable
        If the directory listing could not be obtained. The cache is left
        untouched.
    """
    groups = await _groups_from_listing(directory=directory, conn=conn, log=log)
    return len(groups)
