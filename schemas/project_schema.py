from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field

from schemas.asset_schema import AssetCreate, AssetResponse
from schemas.base_schema import CamelModel
from schemas.tag_schema import TagResponse
from schemas.user_schema import OwnerSummary

Visibility = Literal["PUBLIC", "UNLISTED", "PRIVATE"]
TagName = Annotated[str, Field(min_length=1, max_length=32)]


class ProjectCreate(CamelModel):
    """Client payload for creating a project. Owner is inferred from auth."""

    title: str = Field(min_length=3, max_length=120)
    description: str = Field(min_length=10, max_length=2000)
    category: str | None = Field(default=None, max_length=64)
    tags: list[TagName] = Field(default_factory=list, max_length=10)
    visibility: Visibility = "PUBLIC"
    assets: list[AssetCreate] = Field(default_factory=list)


class ProjectUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=3, max_length=120)
    description: str | None = Field(default=None, min_length=10, max_length=2000)
    category: str | None = Field(default=None, max_length=64)
    visibility: Visibility | None = None
    tags: list[TagName] | None = Field(default=None, max_length=10)


class ProjectResponse(CamelModel):
    id: str
    title: str
    description: str
    category: str | None = None
    visibility: Visibility
    owner_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProjectDetail(ProjectResponse):
    owner: OwnerSummary | None = None
    tags: list[TagResponse] = []
    assets: list[AssetResponse] = []


class ProjectSummary(ProjectDetail):
    download_count: int = 0
    asset_count: int = 0


class ProjectPage(CamelModel):
    items: list[ProjectDetail]
    next_cursor: int | None = None


class ProjectCreated(CamelModel):
    id: str


def project_detail(project, resolve_url=None, model=ProjectDetail, **extra):
    """Flatten a Project row (owner, tag joins, assets) into a response model.

    `resolve_url` maps an asset's file key to a retrieval URL or None.
    """
    assets = []
    for a in project.assets:
        item = AssetResponse.model_validate(a)
        if resolve_url is not None:
            item.url = resolve_url(a.file_key)
        assets.append(item)
    return model(
        id=project.id,
        title=project.title,
        description=project.description,
        category=project.category,
        visibility=project.visibility,
        owner_id=project.owner_id,
        created_at=project.created_at,
        updated_at=project.updated_at,
        owner=OwnerSummary.model_validate(project.owner) if project.owner else None,
        tags=[TagResponse.model_validate(pt.tag) for pt in project.tags],
        assets=assets,
        **extra,
    )
