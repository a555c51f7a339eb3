"""
Pydantic schemas for the upload endpoint responses.
"""
from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Successful upload."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "success": True,
                "docId": "3b0f6a52-7d7c-4a57-9c3a-2f5d7d1b9e10"
            }
        }
    )

    success: bool = True
    doc_id: str = Field(..., alias="docId", description="ID of the created photo document")


class ErrorResponse(BaseModel):
    """Error body shared by every failure status."""
    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "No file received"}}
    )

    error: str
