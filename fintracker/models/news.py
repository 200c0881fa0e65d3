"""
Financial news models.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class NewsArticle(BaseModel):
    """A single headline."""

    title: str
    description: str = "No description available"
    publisher: str = Field("", description="Outlet that published the article")
    published_at: datetime | None = None
    url: str | None = None
    image_url: str | None = None


class NewsDigest(BaseModel):
    """Latest headlines for one news category."""

    category: str = Field(..., description="Lower-cased news category")
    articles: list[NewsArticle] = Field(default_factory=list)
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the digest was produced",
    )
    is_synthetic: bool = Field(False, description="Generated rather than fetched")
    source: str = Field("newsapi", description="Producer of the digest")
    error_reason: str | None = Field(
        None, description="Why a synthetic digest replaced a live one"
    )

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def is_valid(self) -> bool:
        """A usable digest carries at least one article."""
        return len(self.articles) > 0
