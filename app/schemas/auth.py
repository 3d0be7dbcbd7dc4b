from pydantic import BaseModel


class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"


class SuccessResponse(BaseModel):
    success: bool = True


class MeResponse(BaseModel):
    is_admin: bool = True
