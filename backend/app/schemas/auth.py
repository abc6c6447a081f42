"""BizDesk - Auth request/response schemas."""
from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator


class LoginRequest(BaseModel):
    # username or email
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    username: str = Field(min_length=1, max_length=255)
    whatsapp: str = Field(pattern=r"^[0-9]{10,15}$")
    password: str = Field(min_length=8)
    password_confirmation: str

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("The password confirmation does not match.")
        return v


class RefreshRequest(BaseModel):
    refresh_token: str


class LogoutRequest(BaseModel):
    refresh_token: str | None = None


class UserOut(BaseModel):
    id: int
    name: str
    username: str
    email: str
    whatsapp: str | None
    active: bool
    role: str

    model_config = {"from_attributes": True}
