from schemas.base_schema import CamelModel


class OwnerSummary(CamelModel):
    id: str
    name: str | None = None
    image: str | None = None
