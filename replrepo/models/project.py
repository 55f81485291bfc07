"""
Core catalog model for ReplRepo.

Defines the Project dataclass representing a single starter template
listed in the catalog (a GitHub repository or a Replit template).
"""

from dataclasses import dataclass, asdict
from typing import Optional


# The two kinds of source a template can come from
PROJECT_TYPES = ("GitHub", "Replit")


@dataclass
class Project:
    """
    Represents a single starter template in the catalog.

    Projects are read-only from the application's point of view: they are
    rows of the remote ``repos`` table mirrored into memory.

    Attributes:
        id: Row identifier in the remote table.
        name: Display name of the template.
        url: Link to the template on GitHub or Replit.
        type: Where the template lives, one of PROJECT_TYPES.
        description: Short description shown on cards.
        icon: URL of the icon image.
        tags: Topic tags, or None when the row has none.
        rating: Average star rating (0.0 to 5.0), or None when unrated.
        upvotes: Upvote count.
    """

    # Required fields
    id: int
    name: str
    url: str
    type: str

    # Optional fields with defaults
    description: str = ""
    icon: str = ""
    tags: Optional[list[str]] = None
    rating: Optional[float] = None
    upvotes: int = 0

    def __post_init__(self) -> None:
        """Validate fields after initialization."""
        self.validate()

    def validate(self) -> None:
        """
        Validate that required fields are present and valid.

        Raises:
            ValueError: If validation fails.
        """
        errors = []

        if not self.name or not self.name.strip():
            errors.append("name is required and cannot be empty")

        if not self.url or not self.url.strip():
            errors.append("url is required and cannot be empty")

        if self.type not in PROJECT_TYPES:
            errors.append(f"type must be one of {PROJECT_TYPES}, got {self.type!r}")

        if self.rating is not None and not (0.0 <= self.rating <= 5.0):
            errors.append(f"rating must be between 0.0 and 5.0, got {self.rating}")

        if errors:
            raise ValueError(f"Project validation failed: {'; '.join(errors)}")

    @property
    def tag_list(self) -> list[str]:
        """Tags as a list, treating a missing tag set as empty."""
        return list(self.tags) if isinstance(self.tags, list) else []

    def matches(self, query: str) -> bool:
        """
        Check whether a search query appears in this project.

        Matches case-insensitively against name, description and every tag.
        """
        needle = query.lower()
        if needle in self.name.lower():
            return True
        if needle in (self.description or "").lower():
            return True
        return any(needle in tag.lower() for tag in self.tag_list)

    def to_dict(self) -> dict:
        """Convert to a plain dictionary for JSON responses."""
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict) -> Optional["Project"]:
        """
        Create a Project from a ``repos`` row.

        Args:
            record: Row as returned by the data service.

        Returns:
            Project if the row is complete and valid, None otherwise.
        """
        try:
            tags = record.get("tags")
            rating = record.get("rating")
            return cls(
                id=int(record["id"]),
                name=record.get("name") or "",
                url=record.get("url") or "",
                type=record.get("type") or "",
                description=record.get("description") or "",
                icon=record.get("icon") or "",
                tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else None,
                rating=float(rating) if rating is not None else None,
                upvotes=int(record.get("upvotes") or 0),
            )
        except (KeyError, TypeError, ValueError):
            return None

    def __str__(self) -> str:
        """Human-readable string representation."""
        rating = f"{self.rating:.1f}" if self.rating is not None else "N/A"
        return f"[{self.type}] {self.name} (rating: {rating})"

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return f"Project(id={self.id!r}, name={self.name!r}, type={self.type!r})"
