from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from orderdesk.core.errors import OrderdeskError, ShapeError

logger = logging.getLogger(__name__)


async def read_json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw or not raw.strip():
        raise ShapeError("Missing body")
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ShapeError("Invalid JSON body") from None


async def orderdesk_error_handler(request: Request, exc: OrderdeskError) -> JSONResponse:
    logger.info(
        "Request rejected: %s",
        exc.message,
        extra={"endpoint": request.url.path, "method": request.method, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrderdeskError, orderdesk_error_handler)
