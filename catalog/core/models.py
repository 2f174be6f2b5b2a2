from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

# `extra` holds any additional attributes a client wants to keep on a record.
# It is stored as-is and never interpreted by the service.
ExtraData = Optional[Dict[str, Any]]


class ProductCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: Optional[float] = Field(None, allow_inf_nan=False)
    tags: Optional[List[str]] = None
    thumbnail: Optional[str] = Field(
        None, description="Path of the thumbnail relative to the public root"
    )
    extra: ExtraData = None


class Product(ProductCreate):
    id: str


class ProductPatch(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, allow_inf_nan=False)
    tags: Optional[List[str]] = None
    thumbnail: Optional[str] = None
    extra: ExtraData = None


class TagCreate(BaseModel):
    name: str
    extra: ExtraData = None


class Tag(TagCreate):
    id: str


class CountResponse(BaseModel):
    count: int


class UploadedFilePart(BaseModel):
    """One file taken from a multipart body; lives for a single request."""
    filename: Optional[str] = None
    content_type: str
    size: int
    # Empty when the extractor skipped loading the part
    data: bytes = b""
