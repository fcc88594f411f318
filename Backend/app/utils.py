from datetime import datetime, timezone
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_resp(message: str, data: Any = None, status_code: int = 200):
    """
    Standardized Success Response
    """
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "success": True,
            "message": message,
            "data": data if data is not None else {}
        })
    )


def error_resp(message: str, status_code: int = 500, data: Any = None):
    """
    Standardized Error Response
    """
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "success": False,
            "message": message,
            "data": data if data is not None else {}
        })
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
