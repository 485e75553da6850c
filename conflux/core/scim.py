"""
Wire models for the SRAM SCIM group directory.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

SRAM_GROUP_EXTENSION = "urn:mace:surf.nl:sram:scim:extension:Group"


class ScimModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ScimLink(ScimModel):
    name: str | None = None
    value: str | None = None


class ScimGroupInfo(ScimModel):
    urn: str
    description: str | None = None
    labels: list[str] | None = None
    links: list[ScimLink] | None = None

    def link(self, name: str) -> str | None:
        """
        Value of the first link called `name`, if any.
        """
        for link in self.links or []:
            if link.name == name:
                return link.value

        return None


class ScimMember(ScimModel):
    ref: str | None = Field(default=None, alias="$ref")
    display: str
    value: str


class ScimMeta(ScimModel):
    created: datetime | None = None
    last_modified: datetime | None = Field(default=None, alias="lastModified")
    location: str | None = None
    resource_type: str | None = Field(default=None, alias="resourceType")
    version: str | None = None


class ScimGroup(ScimModel):
    id: str
    display_name: str = Field(alias="displayName")
    external_id: str = Field(alias="externalId")
    members: list[ScimMember] = []
    meta: ScimMeta = Field(default_factory=ScimMeta)
    schemas: list[str] = []
    group_info: ScimGroupInfo = Field(alias=SRAM_GROUP_EXTENSION)


class ScimGroupsResult(ScimModel):
    resources: list[ScimGroup] | None = Field(default=None, alias="Resources")
    items_per_page: int | None = Field(default=None, alias="itemsPerPage")
    start_index: int | None = Field(default=None, alias="startIndex")
    total_results: int | None = Field(default=None, alias="totalResults")
    schemas: list[str] | None = None
