from schemas.base_schema import CamelModel


class TagResponse(CamelModel):
    id: str
    slug: str
    name: str
