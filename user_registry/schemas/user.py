"""User Schemas — Pydantic models for the user input shape and the persisted record.

Invariants:
    - UserCreate: name, email, address, phone all required strings; email syntax checked
    - UserRecord: UserCreate fields + positive integer id
    - Unknown keys ignored on input (generated text often carries extras like "age")

Design Decisions:
    - EmailStr (email-validator) over a hand-written regex: matches RFC syntax rules
    - UserRecord.email is plain str: records on disk were validated when written,
      a stricter check on read would turn old files into CorruptStoreError
    - strict=True on str fields: numbers are not silently coerced into names
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    """Fields accepted by create-user and parsed from generated text."""
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, strict=True)

    name: str
    email: EmailStr
    address: str
    phone: str


class UserRecord(BaseModel):
    """A persisted user — one element of the backing JSON array."""
    model_config = ConfigDict(extra="ignore", strict=True)

    id: int = Field(gt=0)
    name: str
    email: str
    address: str
    phone: str
