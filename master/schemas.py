"""Pydantic schemas for master server requests and responses."""

from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from common.exceptions import MalformedAddress, MalformedIdentifier
from common.types import FID, TTL, Location, ReplicationType, parse_address, parse_fid


class AssignKeyOptions(BaseModel):
    """Query options for /dir/assign. Unset fields are left to the master."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    count: Optional[int] = Field(default=None, ge=1)
    replication: Optional[str] = None
    collection: Optional[str] = None
    data_center: Optional[str] = Field(default=None, alias="dataCenter")
    ttl: Optional[str] = None
    preferred_volume: Optional[str] = Field(default=None, alias="preferredVolume")
    rack: Optional[str] = None
    data_node: Optional[str] = Field(default=None, alias="dataNode")
    # bytes to preallocate on disk when new volumes have to be grown
    preallocate: Optional[int] = Field(default=None, ge=0)
    writable_volume_count: Optional[int] = Field(default=None, ge=0, alias="writableVolumeCount")
    disk: Optional[str] = None

    @field_validator("replication", mode="before")
    @classmethod
    def _render_replication(cls, value: Union[str, ReplicationType, None]):
        if isinstance(value, ReplicationType):
            return str(value)
        if isinstance(value, str):
            return str(ReplicationType.from_string(value))
        return value

    @field_validator("ttl", mode="before")
    @classmethod
    def _render_ttl(cls, value: Union[str, TTL, None]):
        if isinstance(value, TTL):
            return str(value)
        if isinstance(value, str):
            return str(TTL.from_string(value))
        return value

    def to_query_params(self) -> dict:
        """Query parameters for the fields that are set, keyed by wire name."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AssignKeyResponse(BaseModel):
    """Response of /dir/assign."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    count: int = Field(ge=1)
    fid: FID
    url: str
    public_url: Optional[str] = Field(default=None, alias="publicUrl")
    auth: Optional[str] = None

    @field_validator("fid", mode="before")
    @classmethod
    def _parse_fid(cls, value):
        if isinstance(value, FID):
            return value
        if not isinstance(value, str) or not value:
            raise ValueError("fid must be a non-empty string")
        try:
            return parse_fid(value)
        except MalformedIdentifier as e:
            raise ValueError(str(e)) from e

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        try:
            parse_address(value)
        except MalformedAddress as e:
            raise ValueError(str(e)) from e
        return value

    @property
    def location(self) -> Location:
        """Primary location used for the initial write."""
        return Location(url=self.url, public_url=self.public_url)

    def assignments(self) -> List[tuple[FID, Location]]:
        """
        Expand a batch assignment into its file ids.

        A grant of count n covers the primary fid and fid_1 .. fid_{n-1},
        all on the primary location.

        Returns:
            List of (FID, Location) pairs, primary first
        """
        location = self.location
        pairs = [(self.fid, location)]
        for delta in range(1, self.count):
            pairs.append((self.fid.with_delta(delta), location))
        return pairs


class LookupVolumeOptions(BaseModel):
    """Query options for /dir/lookup."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    collection: Optional[str] = None
    file_id: Optional[str] = Field(default=None, alias="fileId")
    read: Optional[bool] = None

    @field_validator("file_id", mode="before")
    @classmethod
    def _render_fid(cls, value):
        if isinstance(value, FID):
            return str(value)
        return value

    def to_query_params(self) -> dict:
        params = self.model_dump(by_alias=True, exclude_none=True)
        if "read" in params:
            params["read"] = "true" if params["read"] else "false"
        return params


class LocationSchema(BaseModel):
    """A single location entry in a lookup response."""
    model_config = ConfigDict(populate_by_name=True)

    url: str
    public_url: Optional[str] = Field(default=None, alias="publicUrl")


class LookupVolumeResponse(BaseModel):
    """Response of /dir/lookup."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    volume_id: str = Field(validation_alias=AliasChoices("volumeId", "volumeOrFileId", "volume_id"))
    locations: List[LocationSchema]

    @field_validator("volume_id", mode="before")
    @classmethod
    def _stringify_volume_id(cls, value):
        if isinstance(value, int):
            return str(value)
        return value

    def get_locations(self) -> List[Location]:
        """Locations as shared value objects."""
        return [Location(url=loc.url, public_url=loc.public_url) for loc in self.locations]
