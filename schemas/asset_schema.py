from datetime import datetime
from typing import Literal

from pydantic import Field

from schemas.base_schema import CamelModel

AssetKind = Literal["MODEL", "SCRIPT", "CONFIG", "PREVIEW"]


class AssetCreate(CamelModel):
    kind: AssetKind
    file_key: str = Field(min_length=3)
    file_name: str = Field(min_length=1)
    mime: str = Field(min_length=1)
    size_bytes: int = Field(gt=0)


class AssetResponse(AssetCreate):
    id: str
    project_id: str
    created_at: datetime | None = None
    url: str | None = None
