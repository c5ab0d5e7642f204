from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator


class UserBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class UserResponse(UserBrief):
    email: EmailStr


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    password_confirmation: str

    @field_validator("password_confirmation")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("The password confirmation does not match")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    expires_at: datetime


class LoginResponse(TokenResponse):
    user: UserResponse


class RegisterResponse(BaseModel):
    user: UserResponse
    access_token: str
    refresh_token: str


class MessageResponse(BaseModel):
    message: str
