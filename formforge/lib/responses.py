"""The ``{success, data | error}`` envelope every API response uses."""

from typing import Any

from litestar import Response
from litestar.status_codes import HTTP_200_OK


def success_response(data: Any, status_code: int = HTTP_200_OK) -> Response:
    return Response(
        content={"success": True, "data": data},
        status_code=status_code,
        media_type="application/json",
    )


def error_response(error: str, status_code: int, **extra: Any) -> Response:
    return Response(
        content={"success": False, "error": error, **extra},
        status_code=status_code,
        media_type="application/json",
    )
