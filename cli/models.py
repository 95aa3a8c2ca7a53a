"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class AssignCommand:
    """Request file ids from the master."""

    count: int = 1
    collection: str | None = None
    replication: str | None = None
    ttl: str | None = None
    data_center: str | None = None
    command: Literal["assign"] = "assign"


@dataclass(frozen=True)
class PutCommand:
    """Upload a local file as the raw request body."""

    file_path: str
    mime: str | None = None
    collection: str | None = None
    replication: str | None = None
    ttl: str | None = None
    command: Literal["put"] = "put"


@dataclass(frozen=True)
class PutFormCommand:
    """Upload a local file as a multipart form with its filename."""

    file_path: str
    mime: str | None = None
    collection: str | None = None
    replication: str | None = None
    ttl: str | None = None
    command: Literal["put-form"] = "put-form"


@dataclass(frozen=True)
class GetCommand:
    """Download a blob by file id."""

    fid: str
    output_path: str | None = None
    command: Literal["get"] = "get"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a blob by file id."""

    fid: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class LookupCommand:
    """Show the volume servers holding a volume."""

    volume_id: str
    command: Literal["lookup"] = "lookup"


@dataclass(frozen=True)
class MasterCommand:
    """Show or change the configured master address."""

    address: str | None = None
    command: Literal["master"] = "master"


CommandRequest = (
    AssignCommand
    | PutCommand
    | PutFormCommand
    | GetCommand
    | DeleteCommand
    | LookupCommand
    | MasterCommand
)
