from __future__ import annotations

from app.schemas.results import OperationResult
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def result_response(result: OperationResult) -> JSONResponse:
    """Send an operation result as JSON; failures get their category's status code."""
    return JSONResponse(
        status_code=200 if result.success else result.status_code,
        content=jsonable_encoder(result.model_dump(mode="json")),
    )
