"""
Tests parsing of SCIM directory payloads.
"""

from datetime import datetime, timezone

from conflux.core.scim import ScimGroup, ScimGroupsResult

GROUP_PAYLOAD = {
    "displayName": "Test Group",
    "externalId": "ext-123",
    "id": "123",
    "members": [
        {"$ref": "/Users/user1", "display": "User 1", "value": "user1"},
        {"display": "User 2", "value": "user2"},
    ],
    "meta": {
        "created": "2023-01-01T00:00:00Z",
        "lastModified": "2023-02-01T00:00:00Z",
        "location": "/Groups/123",
        "resourceType": "Group",
        "version": "1.0",
    },
    "schemas": [
        "urn:ietf:params:scim:schemas:core:2.0:Group",
        "urn:mace:surf.nl:sram:scim:extension:Group",
    ],
    "urn:mace:surf.nl:sram:scim:extension:Group": {
        "description": "Test description",
        "labels": ["label"],
        "links": [
            {"name": "sbs_url", "value": "https://example.com"},
            {"name": "logo", "value": "https://example.com/logo.png"},
        ],
        "urn": "org:co",
    },
}


def test_group_payload():
    group = ScimGroup.model_validate(GROUP_PAYLOAD)

    assert group.id == "123"
    assert group.display_name == "Test Group"
    assert group.external_id == "ext-123"
    assert group.members[0].ref == "/Users/user1"
    assert group.members[1].ref is None
    assert group.meta.created == datetime(2023, 1, 1, tzinfo=timezone.utc)
    assert group.group_info.urn == "org:co"
    assert group.group_info.link("logo") == "https://example.com/logo.png"
    assert group.group_info.link("missing") is None


def test_group_payload_without_optional_parts():
    group = ScimGroup.model_validate(
        {
            "displayName": "Bare",
            "externalId": "ext",
            "id": "1",
            "urn:mace:surf.nl:sram:scim:extension:Group": {"urn": "org:co"},
        }
    )

    assert group.members == []
    assert group.meta.created is None
    assert group.group_info.links is None
    assert group.group_info.link("sbs_url") is None


def test_listing_payload():
    result = ScimGroupsResult.model_validate(
        {
            "Resources": [GROUP_PAYLOAD],
            "itemsPerPage": 1,
            "startIndex": 1,
            "totalResults": 1,
        }
    )

    assert len(result.resources) == 1
    assert result.total_results == 1

    assert ScimGroupsResult.model_validate({"totalResults": 0}).resources is None
