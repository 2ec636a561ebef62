# app/models/registration.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime
import re

BINUSIAN_EMAIL_PATTERN = re.compile(r'^.+@binus\.ac\.id$')

# Wire and storage both use camelCase keys (fullName, binusianEmail, ...).
camel_config = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    coerce_numbers_to_str=True,
)

def check_binusian_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    # Stored lowercased, so the domain match and uniqueness ignore case.
    value = value.lower()
    if not BINUSIAN_EMAIL_PATTERN.match(value):
        raise ValueError('Please fill a valid Binusian email')
    return value

class RegistrationCreate(BaseModel):
    model_config = camel_config

    full_name: str = Field(..., min_length=1)
    nim: str = Field(..., min_length=1)
    binusian_email: str = Field(..., min_length=1)
    private_email: str = Field(..., min_length=1)
    major: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)

    @field_validator('binusian_email')
    @classmethod
    def binusian_domain(cls, value: str) -> str:
        return check_binusian_email(value)

class RegistrationUpdate(BaseModel):
    """
    Admin edit. Any subset of the candidate fields; the same per-field rules
    apply. Unknown keys (including _id and registrationDate) are dropped.
    """
    model_config = camel_config

    full_name: Optional[str] = Field(None, min_length=1)
    nim: Optional[str] = Field(None, min_length=1)
    binusian_email: Optional[str] = Field(None, min_length=1)
    private_email: Optional[str] = Field(None, min_length=1)
    major: Optional[str] = Field(None, min_length=1)
    phone_number: Optional[str] = Field(None, min_length=1)

    @field_validator('binusian_email')
    @classmethod
    def binusian_domain(cls, value: Optional[str]) -> Optional[str]:
        return check_binusian_email(value)

class RegistrationOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    full_name: str
    nim: str
    binusian_email: str
    private_email: str
    major: str
    phone_number: str
    registration_date: datetime

    @classmethod
    def from_document(cls, doc: dict) -> "RegistrationOut":
        fields = {key: value for key, value in doc.items() if key != "_id"}
        return cls(id=str(doc["_id"]), **fields)

class RegistrationReceipt(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    full_name: str

class RegistrationCreated(BaseModel):
    message: str
    data: RegistrationReceipt

class RegistrationUpdated(BaseModel):
    message: str
    data: RegistrationOut
