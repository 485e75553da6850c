"""
Tests mapping directory groups to group records.
"""

from datetime import datetime, timezone

from conflux.core.collaboration import CollaborationRequest
from conflux.core.scim import ScimLink, ScimMember
from conflux.service.collaborations import map_scim_group, request_urns
from conflux.service.mock import development_group


def test_map_all_properties():
    group = development_group(
        scim_id="123",
        urn="org:co",
        display_name="Test Group",
        description="Test description",
        members=[
            ScimMember(display="User 1", value="user1"),
            ScimMember(display="User 2", value="user2"),
        ],
        links=[
            ScimLink(name="sbs_url", value="https://example.com"),
            ScimLink(name="logo", value="https://example.com/logo.png"),
        ],
    )

    record = map_scim_group("urn:mace:surf.nl:sram:group:org:co", group)

    assert record.id == "org:co"
    assert record.urn == "urn:mace:surf.nl:sram:group:org:co"
    assert record.display_name == "Test Group"
    assert record.description == "Test description"
    assert record.url == "https://example.com"
    assert record.logo_url == "https://example.com/logo.png"
    assert record.external_id == "external-123"
    assert record.scim_id == "123"
    assert record.created == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert [(m.display_name, m.scim_id) for m in record.members] == [
        ("User 1", "user1"),
        ("User 2", "user2"),
    ]


def test_map_without_matching_links():
    group = development_group(
        scim_id="1",
        urn="org:co",
        display_name="Test Group",
        links=[ScimLink(name="website", value="https://example.org")],
    )

    record = map_scim_group("urn:mace:surf.nl:sram:group:org:co", group)

    assert record.url is None
    assert record.logo_url is None
    assert record.description is None
    assert record.members == []


def test_map_without_links():
    group = development_group(scim_id="1", urn="org:co", display_name="Test Group")
    group.group_info.links = None

    record = map_scim_group("urn:mace:surf.nl:sram:group:org:co", group)

    assert record.url is None
    assert record.logo_url is None


def test_request_urns():
    collaboration_urn, group_urns = request_urns(
        CollaborationRequest(
            organization="surf", collaboration_name="proj1", group_ids=["g1", "g2"]
        )
    )

    assert collaboration_urn == "urn:mace:surf.nl:sram:group:surf:proj1"
    assert group_urns == [
        "urn:mace:surf.nl:sram:group:surf:proj1:g1",
        "urn:mace:surf.nl:sram:group:surf:proj1:g2",
    ]
