from pydantic import BaseModel
from typing import Literal, Optional


class WaitlistJoinRequest(BaseModel):
    email: Optional[str] = None


class WaitlistCountResponse(BaseModel):
    count: int


class WaitlistJoinSuccess(BaseModel):
    success: Literal[True] = True
    message: str
    count: int


class WaitlistJoinFailure(BaseModel):
    success: Literal[False] = False
    message: str


class ErrorResponse(BaseModel):
    error: str
