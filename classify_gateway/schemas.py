"""Request schemas"""
from pydantic import BaseModel, Field


class ClassifyRequest(BaseModel):
    image: str = Field(..., min_length=1, description="Base64-encoded image bytes")
