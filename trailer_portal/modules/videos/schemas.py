from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

class NewVideo(BaseModel):
    """Row written by the upload pipeline; id and created_at are left to the store."""
    slug: str
    title: str = Field(..., min_length=1)
    description: str = ""
    file_path: str
    url: str
    full_url: str = ""

    def to_row(self) -> dict:
        # remote column for full_url is camelCase
        return {
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "file_path": self.file_path,
            "url": self.url,
            "fullUrl": self.full_url,
        }

class VideoRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    slug: str
    title: str
    description: str | None = ""
    file_path: str | None = ""
    url: str | None = ""
    full_url: str | None = Field(default="", alias="fullUrl")
    created_at: datetime | None = None

class Ordering(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    descending: bool = True

# Newest first; deployments whose table lacks created_at fall back to identity order
DEFAULT_ORDERINGS: tuple[Ordering, ...] = (
    Ordering(column="created_at", descending=True),
    Ordering(column="id", descending=True),
)
