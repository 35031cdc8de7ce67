from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenRequest(BaseModel):
    userId: str
    token: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="ignore")


class PushTestRequest(BaseModel):
    userId: str

    model_config = ConfigDict(extra="ignore")


class TokenResponse(BaseModel):
    success: bool = True
    message: str


class PushTestResponse(BaseModel):
    success: bool = True
    message: str
    response: Optional[str] = None
    apiVersion: str = "FCM_V1"
