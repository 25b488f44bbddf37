"""
Auth schemas: OTP start/verify bodies and the authenticated caller.
"""
from pydantic import BaseModel, field_validator


def _coerce_str(v):
    # Clients sometimes send the phone or code as a JSON number
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(int(v)) if float(v).is_integer() else str(v)
    return v


class OTPStartRequest(BaseModel):
    phone: str

    @field_validator("phone", mode="before")
    @classmethod
    def phone_to_str(cls, v):
        return _coerce_str(v)

    @field_validator("phone")
    @classmethod
    def phone_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("phone required")
        return v


class OTPVerifyRequest(BaseModel):
    phone: str
    code: str

    @field_validator("phone", "code", mode="before")
    @classmethod
    def to_str(cls, v):
        return _coerce_str(v)

    @field_validator("phone", "code")
    @classmethod
    def present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("phone and code required")
        return v


class OTPStartResponse(BaseModel):
    ok: bool = True
    message: str


class OTPVerifyResponse(BaseModel):
    token: str
    role: str
    token_type: str = "bearer"


class CurrentUser(BaseModel):
    """Claims carried by a verified access token."""
    phone: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
