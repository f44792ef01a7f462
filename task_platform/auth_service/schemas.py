from pydantic import BaseModel, Field


class VerifyTokenResponse(BaseModel):
    message: str = "Valid token."
    uid: str


class PasswordHashRequest(BaseModel):
    password: str = Field(..., min_length=1)


class HashedPasswordResponse(BaseModel):
    hashed_password: str


class TokenRequest(BaseModel):
    email: str = Field(..., min_length=1)
    hashed_password: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    message: str = "Token created."
    token: str
