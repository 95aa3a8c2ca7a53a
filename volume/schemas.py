"""Upload payload variants and pydantic schemas for volume server requests and responses."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from common.constants import DEFAULT_UPLOAD_FIELD
from common.types import TTL


@dataclass(frozen=True)
class RawPayload:
    """Blob sent as the entire request body."""

    data: bytes
    mode: Literal["raw"] = "raw"


@dataclass(frozen=True)
class MultipartPayload:
    """Blob wrapped in a single multipart/form-data file part."""

    data: bytes
    filename: Optional[str] = None
    mime: Optional[str] = None
    field_name: str = DEFAULT_UPLOAD_FIELD
    mode: Literal["multipart"] = "multipart"


UploadPayload = RawPayload | MultipartPayload


class UploadOptions(BaseModel):
    """Metadata for an upload. Unset fields fall back to the volume server's defaults."""
    model_config = ConfigDict(frozen=True)

    mime: Optional[str] = None
    filename: Optional[str] = None
    ttl: Optional[str] = None
    # modification timestamp in epoch seconds
    ts: Optional[int] = Field(default=None, ge=0)
    # content is a chunk manifest
    cm: Optional[bool] = None
    replicated: Optional[bool] = None
    jwt: Optional[str] = Field(default=None, repr=False)

    @field_validator("ttl", mode="before")
    @classmethod
    def _render_ttl(cls, value: Union[str, TTL, None]):
        if isinstance(value, TTL):
            return str(value)
        if isinstance(value, str):
            return str(TTL.from_string(value))
        return value

    def to_query_params(self) -> dict:
        """Query parameters understood by the volume write endpoint."""
        params = {}
        if self.ttl is not None:
            params['ttl'] = self.ttl
        if self.ts is not None:
            params['ts'] = str(self.ts)
        if self.cm is not None:
            params['cm'] = "true" if self.cm else "false"
        if self.replicated:
            params['type'] = "replicate"
        return params


class UploadResponse(BaseModel):
    """Response of a successful write."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    size: int = Field(ge=0)
    e_tag: Optional[str] = Field(default=None, alias="eTag")
    name: Optional[str] = None
    mime: Optional[str] = None


class DeleteResponse(BaseModel):
    """Response of a successful delete."""
    model_config = ConfigDict(frozen=True)

    size: int = Field(ge=0)


class ResizeMode(str, Enum):
    FIT = "fit"
    FILL = "fill"


class GetFileOptions(BaseModel):
    """Read options; resize and crop only apply to images."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    read_deleted: Optional[bool] = Field(default=None, alias="readDeleted")
    width: Optional[int] = Field(default=None, ge=1)
    height: Optional[int] = Field(default=None, ge=1)
    mode: Optional[ResizeMode] = None
    crop_x1: Optional[int] = Field(default=None, ge=0)
    crop_y1: Optional[int] = Field(default=None, ge=0)
    crop_x2: Optional[int] = Field(default=None, ge=0)
    crop_y2: Optional[int] = Field(default=None, ge=0)

    def to_query_params(self) -> dict:
        params = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if "readDeleted" in params:
            params["readDeleted"] = "true" if params["readDeleted"] else "false"
        return params
