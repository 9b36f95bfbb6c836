"""
Request Schemas

Pydantic models for the JSON bodies the API accepts. Only the fields the
resort front-end relies on are required; everything else is passed through
to MongoDB as sent (properties) or ignored (users).

Collections written through these models:
- UserCreate     -> "users"
- PropertyCreate -> "propertyData"
"""

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from typing import Optional, Union


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Display name")
    email: str = Field(..., min_length=1, description="Email address, one user per email")
    uid: Optional[str] = Field(None, description="Auth provider uid")
    password: Optional[str] = Field(None, description="Password as sent by the client")
    membership: Optional[str] = Field(None, description="Membership tier")
    imageURL: Optional[str] = Field(None, description="Avatar URL")


class RoleUpdate(BaseModel):
    isAdmin: StrictBool = Field(..., description="New admin flag")


class PropertyDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zipCode: Union[str, int] = Field(..., description="Postal code, string or number")

    @field_validator("zipCode")
    @classmethod
    def zip_code_not_blank(cls, v):
        if isinstance(v, str) and not v.strip():
            raise ValueError("zipCode must not be empty")
        return v


class PropertyCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    propertyType: str = Field(..., min_length=1, description="e.g. hotel, villa, apartment")
    location: str = Field(..., min_length=1)
    details: PropertyDetails


class InsertResult(BaseModel):
    message: str
    insertedId: str
