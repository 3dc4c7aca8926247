from typing import Any

from fastapi import Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def json_response(body: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=jsonable_encoder(body), status_code=status_code, headers=CORS_HEADERS)


def preflight_response(content: str = "") -> Response:
    return Response(content=content, status_code=200, headers=CORS_HEADERS)
