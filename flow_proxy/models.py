from pydantic import BaseModel
from typing import Optional


class BaseUrlUpdated(BaseModel):
    message: str
    baseUrl: str


class BaseUrlState(BaseModel):
    baseUrl: str


class HealthStatus(BaseModel):
    status: str
    baseUrl: str
    timestamp: str


class ErrorEnvelope(BaseModel):
    error: str
    details: Optional[str] = None

    def as_content(self) -> dict:
        return self.model_dump(exclude_none=True)
