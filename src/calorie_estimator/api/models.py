"""Request bodies accepted by the HTTP shell."""

from pydantic import BaseModel


class ImageUrlRequest(BaseModel):
    """Remote image to download and analyze."""

    url: str


class IngredientQuery(BaseModel):
    """Quantity and name to estimate as a single ingredient."""

    quantity: str
    name: str


class QuantityUpdate(BaseModel):
    """New free-text quantity for a draft ingredient."""

    quantity: str
