"""
Service layer for the SRAM group URN cache.
"""

from typing import Iterable

from sqlalchemy import delete, select, text
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from conflux.database.urn_cache import GroupIdConnection


async def find(urn: str, conn: AsyncSession) -> str | None:
    """
    The SCIM id cached for `urn`, or None on a miss.
    """
    connection = await conn.get(GroupIdConnection, urn)

    if connection is None:
        return None

    return connection.scim_id


async def find_many(urns: Iterable[str], conn: AsyncSession) -> dict[str, str]:
    """
    Look up several URNs in one query. URNs that are not cached are absent
    from the returned mapping.
    """
    urns = set(urns)

    if not urns:
        return {}

    result = await conn.execute(
        select(GroupIdConnection).where(GroupIdConnection.urn.in_(urns))
    )

    return {connection.urn: connection.scim_id for connection in result.scalars()}


async def read_all(conn: AsyncSession) -> list[GroupIdConnection]:
    result = await conn.execute(select(GroupIdConnection))
    return list(result.scalars().all())


async def replace_all(
    entries: Iterable[tuple[str, str]],
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> int:
    """
    Replace the whole cache with `entries`, `(urn, scim_id)` pairs. Existing
    rows are all deleted before the new ones are inserted, inside the
    caller's transaction, so the cache only ever holds one directory listing.

    Parameters
    ----------
    entries: Iterable[tuple[str, str]]
        The URN and SCIM id of every group in the listing. Later duplicates of
        a URN win.
    conn: AsyncSession
        The database session.
    log: FilteringBoundLogger
        Logger instance.

    Returns
    -------
    int
        The number of cached entries.
    """
    connections = {
        urn: GroupIdConnection(urn=urn, scim_id=scim_id) for urn, scim_id in entries
    }

    # Concurrent refreshes queue here until the holder commits; plain
    # readers are not blocked and keep seeing the last committed listing.
    if conn.get_bind().dialect.name == "postgresql":
        await conn.execute(
            text(
                f"LOCK TABLE {GroupIdConnection.__tablename__} "
                "IN SHARE ROW EXCLUSIVE MODE"
            )
        )

    result = await conn.execute(delete(GroupIdConnection))

    conn.add_all(connections.values())
    await conn.flush()

    await log.ainfo(
        "urn_cache.replaced",
        number_removed=result.rowcount,
        number_added=len(connections),
    )

    return len(connections)
