"""
Data models for Cat API entities.

This module defines immutable dataclasses representing the catalog's
breeds and their reference images. These models travel between the
remote client, the sync engine, the SQLite cache and the view state.

Design Decisions:
    - All dataclasses are frozen (immutable); updates go through
      dataclasses.replace()
    - Field names are snake_case; from_api() maps the API's JSON keys
    - is_favorite and last_updated are locally owned: from_api() never
      reads them, the API has no such concept
    - The image is flattened into image_* columns for storage

Usage:
    from catbreeds.api.models import CatBreed

    breed = CatBreed.from_api(payload)
    row = breed.to_database_dict()
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CatImage:
    """
    Reference image of a breed.

    Attributes:
        id: Cat API image id. Example: "0XYvRd7oD"
        url: Direct image URL.
        width: Width in pixels.
        height: Height in pixels.
        mime_type: Optional MIME type, e.g. "image/jpeg".
    """

    id: str
    url: str
    width: int
    height: int
    mime_type: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CatImage":
        """
        Create a CatImage from a GET images/{id} response.

        Raises:
            KeyError: If id or url is missing.
            TypeError, ValueError: If width/height are not integers.
        """
        return cls(
            id=str(data["id"]),
            url=str(data["url"]),
            width=int(data.get("width") or 0),
            height=int(data.get("height") or 0),
            mime_type=data.get("mime_type"),
        )


@dataclass(frozen=True)
class CatBreed:
    """
    Immutable representation of a cat breed.

    Remote-owned fields are overwritten on every sync; is_favorite is
    user-owned and only changed by the favorite toggle; last_updated is set
    by the cache on every write.

    Attributes:
        id: Stable breed id, primary key. Example: "abys"
        name: Display name, the listing sort key. Example: "Abyssinian"
        description: Free text description.
        origin: Country of origin. Example: "Egypt"
        temperament: Comma separated traits. Example: "Active, Energetic"
        life_span: Life span text as the API returns it. Example: "14 - 15"
        reference_image_id: Id of the breed's reference image, if any.
        image: Resolved image, None until enriched or when lookup failed.
        is_favorite: Local favorite flag.
        last_updated: Epoch millis of the last cache write, None if never cached.
    """

    id: str
    name: str
    description: str | None = None
    origin: str | None = None
    temperament: str | None = None
    life_span: str | None = None
    reference_image_id: str | None = None
    image: CatImage | None = None
    is_favorite: bool = False
    last_updated: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CatBreed":
        """
        Create a CatBreed from one element of a breeds response.

        Some Cat API responses embed the image under "image"; it is kept if
        complete. Favorite flag and timestamp are never read from the payload.

        Raises:
            KeyError: If id is missing.
        """
        image = None
        embedded = data.get("image")
        if isinstance(embedded, dict) and embedded.get("url") and embedded.get("id"):
            try:
                image = CatImage.from_api(embedded)
            except (KeyError, TypeError, ValueError):
                image = None

        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description"),
            origin=data.get("origin"),
            temperament=data.get("temperament"),
            life_span=data.get("life_span"),
            reference_image_id=data.get("reference_image_id"),
            image=image,
        )

    def to_database_dict(self) -> dict[str, Any]:
        """Convert to a flat dict matching the breeds table columns."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "origin": self.origin,
            "temperament": self.temperament,
            "life_span": self.life_span,
            "reference_image_id": self.reference_image_id,
            "image_url": self.image.url if self.image else None,
            "image_width": self.image.width if self.image else None,
            "image_height": self.image.height if self.image else None,
            "image_mime_type": self.image.mime_type if self.image else None,
            "is_favorite": 1 if self.is_favorite else 0,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_database_dict(cls, data: dict[str, Any]) -> "CatBreed":
        """
        Rebuild a CatBreed from a breeds table row.

        The image is restored only when url, width and height are all
        stored; its id is the breed's reference_image_id.
        """
        image = None
        if (
            data.get("image_url") is not None
            and data.get("image_width") is not None
            and data.get("image_height") is not None
        ):
            image = CatImage(
                id=data.get("reference_image_id") or "",
                url=data["image_url"],
                width=data["image_width"],
                height=data["image_height"],
                mime_type=data.get("image_mime_type"),
            )

        return cls(
            id=data["id"],
            name=data.get("name") or "",
            description=data.get("description"),
            origin=data.get("origin"),
            temperament=data.get("temperament"),
            life_span=data.get("life_span"),
            reference_image_id=data.get("reference_image_id"),
            image=image,
            is_favorite=bool(data.get("is_favorite")),
            last_updated=data.get("last_updated"),
        )

    @property
    def temperament_traits(self) -> tuple[str, ...]:
        """Temperament split into individual traits."""
        if not self.temperament:
            return ()
        return tuple(t.strip() for t in self.temperament.split(",") if t.strip())

    @property
    def image_url(self) -> str | None:
        return self.image.url if self.image else None
