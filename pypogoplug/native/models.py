"""Pydantic models for the Pogoplug API."""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, Field

DEFAULT_API_URL = "http://service.pogoplug.com/svc/api/"
DEFAULT_TIMEOUT = 10.0


class ResponseFormat(str, Enum):
    """Response encodings offered by the API."""

    JSON = "json"
    XML = "xml"
    SOAP = "soap"


class ClientConfig(BaseModel):
    """Client configuration.

    Stored in the .pogoplug config file in YAML format, next to the
    persisted ``valtoken``.
    """

    email: str = Field(default="", description="Account email")
    password: str = Field(default="", description="Account password")
    api_url: str = Field(
        default=DEFAULT_API_URL,
        alias="apiurl",
        description="Base URL of the API",
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.JSON,
        alias="format",
        description="Response encoding requested from the API",
    )
    timeout: float = Field(default=DEFAULT_TIMEOUT, description="HTTP timeout")

    model_config = {"populate_by_name": True}

    @property
    def has_credentials(self) -> bool:
        return bool(self.email)


class ApiException(BaseModel):
    """Contents of an ``HB-EXCEPTION`` envelope."""

    ecode: int = Field(..., description="Numeric error code")
    message: str = Field(default="", description="Server supplied detail")


# =============================================================================
# Account and Device Models
# =============================================================================


class User(BaseModel):
    """Account details returned by ``getUser``."""

    user_id: str = Field(..., alias="userid")
    screen_name: str = Field(default="", alias="screenname")
    email: str = Field(default="")
    flags: str = Field(default="")
    options: str = Field(default="")

    model_config = {"populate_by_name": True}


class Service(BaseModel):
    """A storage endpoint exposed by a device (a drive or partition)."""

    device_id: str = Field(..., alias="deviceid")
    service_id: str = Field(..., alias="serviceid")
    service_class: str = Field(default="", alias="sclass")
    service_type: str = Field(default="", alias="type")
    name: str = Field(default="")
    version: str = Field(default="")
    online: bool = Field(default=False)
    space: str = Field(
        default="",
        description="Byte figures for the service as reported, '<a>/<b>'",
    )
    flags: str = Field(default="")

    model_config = {"populate_by_name": True}

    @property
    def space_figures(self) -> tuple[int, int]:
        """Split ``space`` into its two byte counts (0 when absent)."""
        parts = self.space.split("/")
        figures = []
        for part in parts[:2]:
            try:
                figures.append(int(part))
            except ValueError:
                figures.append(0)
        while len(figures) < 2:
            figures.append(0)
        return figures[0], figures[1]


class Device(BaseModel):
    """A Pogoplug device associated with the account."""

    device_id: str = Field(..., alias="deviceid")
    name: str = Field(default="")
    version: str = Field(default="")
    flags: str = Field(default="")
    owner_id: str = Field(default="", alias="ownerid")
    valid: bool = Field(default=True)
    services: list[Service] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


# =============================================================================
# File Models
# =============================================================================


class FileType(IntEnum):
    """Type of a file entry, as used by ``createFile`` and listings."""

    FILE = 0
    DIRECTORY = 1
    EXTRA_STREAM = 2
    SYMLINK = 3


class PogoFile(BaseModel):
    """A file or directory stored on a service."""

    file_id: str = Field(..., alias="fileid")
    name: str = Field(default="")
    type: int = Field(default=FileType.FILE, description="FileType value")
    parent_id: str = Field(default="", alias="parentid")
    mimetype: str = Field(default="")
    size: int = Field(default=0, description="Size in bytes")
    ctime: int = Field(default=0, description="Creation time (ms since epoch)")
    mtime: int = Field(default=0, description="Modification time (ms since epoch)")

    model_config = {"populate_by_name": True}

    @property
    def file_type(self) -> FileType | None:
        try:
            return FileType(self.type)
        except ValueError:
            return None

    @property
    def is_directory(self) -> bool:
        """Check if this entry is a directory."""
        return self.type == FileType.DIRECTORY
