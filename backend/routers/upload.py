"""Upload router converting FPB.JS JSON or AutomationML files to the other format."""

import json
from pathlib import Path

from fastapi import APIRouter, HTTPException, UploadFile
from fastapi.responses import Response

from config import settings
from routers.convert import convert_aml_to_json, convert_json_to_aml

router = APIRouter()


def _detect_format(filename: str, content: str) -> str:
    """Detect file format from filename extension and content.

    Returns:
        'json' for FPB.JS files, 'aml' for AutomationML files.

    Raises:
        HTTPException: If format cannot be determined.
    """
    lower_name = filename.lower()
    if lower_name.endswith(".json"):
        return "json"
    if lower_name.endswith(".aml") or lower_name.endswith(".xml"):
        return "aml"

    # Fallback: inspect content
    stripped = content.strip()
    if stripped.startswith("[") or stripped.startswith("{"):
        return "json"
    if stripped.startswith("<?xml") or stripped.startswith("<"):
        return "aml"

    raise HTTPException(
        status_code=400,
        detail="Unable to detect file format. Use .json, .aml, or .xml extension.",
    )


@router.post("/convert")
async def convert_file(file: UploadFile) -> Response:
    """Convert an uploaded FPB.JS JSON file to AML, or an AML file to JSON.

    The result is returned as a download named after the uploaded file.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    raw_bytes = await file.read()
    if len(raw_bytes) > settings.max_body_bytes:
        raise HTTPException(status_code=413, detail="File too large")
    try:
        content = raw_bytes.decode("UTF-8")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=400, detail="File must be UTF-8 encoded"
        ) from exc

    stem = Path(file.filename).stem or "process"
    if _detect_format(file.filename, content) == "json":
        return Response(
            content=convert_json_to_aml(content),
            media_type="application/xml; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{stem}.aml"'},
        )

    document = convert_aml_to_json(raw_bytes)
    return Response(
        content=json.dumps(document, indent=4),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{stem}.json"'},
    )
