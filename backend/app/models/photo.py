"""
Photo upload domain models.

PhotoUpload is transient (one request). EventReference and AssetReference
point at documents in the content store. PhotoRecord is the document this
service creates; to_document() renders it in the store's wire format.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_EVENT_SLUG = "unknown"


class PhotoUpload(BaseModel):
    """A validated file part plus form fields."""
    content: bytes = Field(..., repr=False)
    filename: Optional[str] = None
    content_type: Optional[str] = None
    event_slug: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class Reference(BaseModel):
    """Store reference: {"_type": "reference", "_ref": id}."""
    model_config = ConfigDict(populate_by_name=True)

    ref: str = Field(..., alias="_ref")
    type: str = Field("reference", alias="_type")


class EventReference(BaseModel):
    """Event document projected to its id."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")

    def as_reference(self) -> Reference:
        return Reference(ref=self.id)


class AssetReference(BaseModel):
    """Uploaded asset document. Only the id is needed."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id")


class ImageField(BaseModel):
    asset: Reference


class PhotoRecord(BaseModel):
    """Photo document linking an asset to an event."""
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field("photo", alias="_type")
    name: Optional[str] = None
    image: ImageField
    taken_at: str = Field(..., alias="takenAt")
    created_at: str = Field(..., alias="createdAt")
    # Exactly one of these is set, depending on the event association mode
    event: Optional[Reference] = None
    event_slug: Optional[str] = Field(None, alias="eventSlug")

    @classmethod
    def build(
        cls,
        asset: AssetReference,
        taken_at: str,
        created_at: str,
        filename: Optional[str] = None,
        event: Optional[EventReference] = None,
        event_slug: Optional[str] = None,
    ) -> "PhotoRecord":
        """Link an asset to either a resolved event or a raw slug."""
        record = cls(
            name=filename,
            image=ImageField(asset=Reference(ref=asset.id)),
            taken_at=taken_at,
            created_at=created_at,
        )
        if event is not None:
            record.event = event.as_reference()
        else:
            record.event_slug = event_slug or UNKNOWN_EVENT_SLUG
        return record

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
