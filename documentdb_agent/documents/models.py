"""Hotel data models.

Field names follow the PascalCase keys of the hotel data file and the
stored documents; Python attributes are snake_case aliases of them.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Keys of the data file that are never written to the vector collection.
EXCLUDED_FIELDS = {"description_fr", "location", "rooms"}


class Address(BaseModel):
    """Postal address of a hotel."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    street_address: str = Field(default="", alias="StreetAddress")
    city: str = Field(default="", alias="City")
    state_province: str = Field(default="", alias="StateProvince")
    postal_code: str = Field(default="", alias="PostalCode")
    country: str = Field(default="", alias="Country")


class Hotel(BaseModel):
    """A hotel record.

    Attributes:
        hotel_id: Stable identifier, also used as the document ``_id``.
        hotel_name: Display name, quoted verbatim in recommendations.
        description: Free-text description; embedded together with the name.
        category: Hotel category (e.g. "Boutique").
        tags: Amenity tags.
        parking_included: Whether parking is included.
        is_deleted: Soft-delete flag carried over from the source data.
        last_renovation_date: Date of last renovation, if known.
        rating: Guest rating.
        address: Postal address.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    hotel_id: str = Field(alias="HotelId")
    hotel_name: str = Field(alias="HotelName")
    description: str = Field(default="", alias="Description")
    description_fr: str | None = Field(default=None, alias="Description_fr")
    category: str = Field(default="", alias="Category")
    tags: list[str] = Field(default_factory=list, alias="Tags")
    parking_included: bool = Field(default=False, alias="ParkingIncluded")
    is_deleted: bool = Field(default=False, alias="IsDeleted")
    last_renovation_date: datetime | None = Field(
        default=None,
        alias="LastRenovationDate",
    )
    rating: float | None = Field(default=None, alias="Rating")
    address: Address = Field(default_factory=Address, alias="Address")
    location: dict[str, Any] | None = Field(default=None, alias="Location")
    rooms: list[dict[str, Any]] = Field(default_factory=list, alias="Rooms")

    def page_content(self) -> str:
        """Text that is embedded for this hotel."""
        return f"Hotel: {self.hotel_name}\n\n{self.description}"

    def to_document(self, vector: list[float], embedded_field: str) -> dict[str, Any]:
        """Build the stored document, pairing the hotel with its embedding.

        Args:
            vector: Embedding of ``page_content()``.
            embedded_field: Document field that holds the vector.

        Returns:
            Document ready for insertion.
        """
        document: dict[str, Any] = {"_id": self.hotel_id}
        document.update(self.model_dump(by_alias=True, exclude=EXCLUDED_FIELDS))
        document[embedded_field] = list(vector)
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Hotel":
        """Rebuild a hotel from a stored document (vector and ``_id`` ignored)."""
        return cls.model_validate(document)
