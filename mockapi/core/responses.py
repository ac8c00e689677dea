"""
Response helpers shared by the routers.

Every payload is JSON; when a JSONP callback is requested the payload is
wrapped as ``callback(<json>);`` and served as JavaScript.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi.responses import JSONResponse, Response


def output(data: Any, status_code: int = 200, callback: str = "") -> Response:
    if status_code == 204:
        return Response(status_code=204)
    if not callback:
        return JSONResponse(data, status_code=status_code)
    body = f"{callback}({json.dumps(data, ensure_ascii=False)});"
    return Response(body, status_code=status_code, media_type="text/javascript")
