"""
URN to SCIM id cache ORM
"""

from sqlmodel import Field, SQLModel


class GroupIdConnection(SQLModel, table=True):
    """
    Maps a full SRAM group URN to the id the SCIM directory knows it by.
    """

    __tablename__ = "group_id_connection"

    urn: str = Field(primary_key=True)
    scim_id: str
