from pydantic import Field

from schemas.asset_schema import AssetKind
from schemas.base_schema import CamelModel


class UploadFileIn(CamelModel):
    name: str = Field(min_length=1)
    size: int = Field(gt=0)
    type: str = "application/octet-stream"


class UploadRequest(CamelModel):
    files: list[UploadFileIn] = Field(min_length=1)


class UploadRouteInfo(CamelModel):
    slug: str
    kind: AssetKind
    max_file_size: int


class UploadTicket(CamelModel):
    key: str
    name: str
    size: int
    type: str
    kind: AssetKind
    url: str | None = None
