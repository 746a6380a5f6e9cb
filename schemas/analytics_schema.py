from datetime import datetime
from typing import Any

from pydantic import AnyUrl, ConfigDict, Field

from schemas.base_schema import CamelModel


class AnalyticsEventIn(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    properties: dict[str, Any] | None = None
    timestamp: datetime | None = None
    session_id: str | None = None
    user_id: str | None = None
    url: AnyUrl | None = None


class _Properties(CamelModel):
    model_config = ConfigDict(extra="ignore")


class PageViewProperties(_Properties):
    pass


class ProjectInteractionProperties(_Properties):
    project_id: str | None = None
    action: str | None = None


class SearchProperties(_Properties):
    query: str | None = None
    results_count: int = 0


class FileUploadProperties(_Properties):
    file_name: str | None = None
    file_size: int = 0
    file_type: str = "unknown"
    success: bool = False


class ErrorProperties(_Properties):
    error: str | None = None
    context: Any = "unknown"
    user_agent: str = ""


# Known event names and the explicit field set each one carries.
EVENT_PROPERTIES: dict[str, type[_Properties]] = {
    "page_view": PageViewProperties,
    "project_interaction": ProjectInteractionProperties,
    "search": SearchProperties,
    "file_upload": FileUploadProperties,
    "error": ErrorProperties,
}


def typed_properties(name: str, properties: dict[str, Any] | None) -> _Properties | None:
    """Validate an event's free-form bag against its name's variant.

    Returns None for names with no variant. Raises pydantic.ValidationError
    when the bag does not fit.
    """
    model = EVENT_PROPERTIES.get(name)
    if model is None:
        return None
    return model.model_validate(properties or {})
