from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadRequest(BaseModel):
    requester_id: Optional[int] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None
    image_bytes: Optional[bytes] = None
    # Raw form values; the uploader parses and range-checks them
    creativity_value: Union[int, str, None] = None
    excitement_value: Union[int, str, None] = None
    jinnification: Union[bool, str, None] = None


class NewGalleryItem(CamelModel):
    user_id: int
    image: str
    thumbnail: str
    creativity_value: int = Field(..., ge=0, le=100)
    excitement_value: int = Field(..., ge=0, le=100)
    jinnification: bool
    description: str


class GalleryRecord(NewGalleryItem):
    id: int
    created_at: datetime


class NewUser(CamelModel):
    username: str
    password: str
    full_name: Optional[str] = None
    email: Optional[str] = None


class User(NewUser):
    id: int


class PublicUser(CamelModel):
    id: int
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    full_name: Optional[str] = None
    email: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class MessageResponse(BaseModel):
    message: str
