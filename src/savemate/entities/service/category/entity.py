"""Entity: Category."""

from pydantic import Field

from src.savemate.entities._base import Entity

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class Category(Entity):
    """A named deal category with a unique, kebab-case slug."""

    name: str = Field(min_length=1, max_length=80)
    slug: str = Field(min_length=1, max_length=80, pattern=SLUG_PATTERN)
