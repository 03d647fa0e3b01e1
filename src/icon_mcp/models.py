"""Canonical data model shared by providers, normalizer and engine."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IconStyle(str, Enum):
    OUTLINE = "outline"
    SOLID = "solid"
    THIN = "thin"
    DUOTONE = "duotone"
    BOLD = "bold"


class IconCategory(str, Enum):
    INTERFACE = "interface"
    ARROWS = "arrows"
    COMMUNICATION = "communication"
    ECOMMERCE = "ecommerce"
    SECURITY = "security"
    FILES = "files"
    USERS = "users"
    MEDIA = "media"
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    MAPS = "maps"
    SOCIAL = "social"
    HEALTH = "health"
    WEATHER = "weather"
    TRANSPORT = "transport"
    DEVELOPMENT = "development"
    BRANDS = "brands"
    FOOD = "food"
    NATURE = "nature"
    HOUSEHOLD = "household"


class RawHit(BaseModel):
    """Unnormalized search hit as returned by a provider."""

    model_config = ConfigDict(frozen=True)

    qualified_name: str
    provider: str
    collection: dict | None = None


class Icon(BaseModel):
    """Canonical icon. ``id`` and ``qualified_name`` are both ``prefix:name``."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    tags: tuple[str, ...]
    style: IconStyle = IconStyle.OUTLINE
    library: str
    category: IconCategory = IconCategory.INTERFACE
    qualified_name: str
    source_provider: str

    @field_validator("id", "qualified_name")
    @classmethod
    def _well_formed(cls, value: str) -> str:
        prefix, sep, name = value.partition(":")
        if not sep or not prefix or not name:
            raise ValueError(f"not a qualified icon name: {value!r}")
        return value

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


class SearchFilters(BaseModel):
    """Optional result filters. Empty sets mean "no restriction"."""

    model_config = ConfigDict(frozen=True)

    libraries: frozenset[str] = Field(default_factory=frozenset)
    styles: frozenset[IconStyle] = Field(default_factory=frozenset)
    categories: frozenset[IconCategory] = Field(default_factory=frozenset)

    def is_empty(self) -> bool:
        return not (self.libraries or self.styles or self.categories)

    def matches(self, icon: Icon) -> bool:
        if self.libraries and icon.library not in self.libraries:
            return False
        if self.styles and icon.style not in self.styles:
            return False
        if self.categories and icon.category not in self.categories:
            return False
        return True

    def key_params(self) -> dict[str, list[str]]:
        """Sorted, order-insensitive representation for cache keys."""
        return {
            "libraries": sorted(self.libraries),
            "styles": sorted(s.value for s in self.styles),
            "categories": sorted(c.value for c in self.categories),
        }


class SearchQuery(BaseModel):
    """Free-text query plus filters and a 1-based page number."""

    model_config = ConfigDict(frozen=True)

    text: str
    filters: SearchFilters = Field(default_factory=SearchFilters)
    page: int = Field(default=1, ge=1)

    def is_blank(self) -> bool:
        return not self.text.strip()

    def cache_params(self) -> dict:
        return {"query": self.text, "page": self.page, **self.filters.key_params()}
