"""Shared schema types."""

from pydantic import BaseModel, Field


class GeoPoint(BaseModel):
    """WGS84 point."""

    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)

    def as_tuple(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict | list | None = None


class ErrorResponse(BaseModel):
    """Body returned for every application error."""

    success: bool = False
    error: ErrorBody
