from datetime import datetime, timezone
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_response(data: Any = None, status_code: int = 200) -> JSONResponse:
    body: dict[str, Any] = {"success": True, "timestamp": _now_iso()}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=body)


def error_response(error: str, status_code: int, details: Any = None, headers: dict | None = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "error": error, "timestamp": _now_iso()}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def validation_details(errors) -> list[dict]:
    """Flatten pydantic/FastAPI error dicts into field/message/code triples."""
    details = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        details.append({
            "field": ".".join(loc),
            "message": err.get("msg", ""),
            "code": err.get("type", ""),
        })
    return details
