"""
Exception handlers rendering UploadError as {"error": message}.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.exceptions import UploadError


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the UploadError handler on the app."""

    @app.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message}
        )
