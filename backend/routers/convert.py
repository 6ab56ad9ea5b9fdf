"""Conversion router for FPB.JS JSON <-> AutomationML request bodies."""

import json
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from config import settings
from export.aml_exporter import AmlExportError, export_aml
from models.process_model import FpbDocument
from parser.aml_parser import AmlParseError, AmlParser

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_body(request: Request) -> bytes:
    """Read the raw request body, enforcing the configured size limit.

    Raises:
        HTTPException: 413 if the body is too large, 400 if it is empty.
    """
    body = await request.body()
    if len(body) > settings.max_body_bytes:
        raise HTTPException(status_code=413, detail="Request body too large")
    if not body.strip():
        raise HTTPException(status_code=400, detail="Request body is empty")
    return body


def convert_json_to_aml(content: str | bytes) -> str:
    """Convert FPB.JS JSON text to AML text.

    Raises:
        HTTPException: 400 on malformed JSON or a structural conversion error.
    """
    try:
        data = json.loads(content)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid JSON: {exc}") from exc

    try:
        document = FpbDocument.from_json(data)
        return export_aml(document)
    except (ValueError, AmlExportError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def convert_aml_to_json(content: str | bytes) -> list[dict]:
    """Convert AML text to the FPB.JS JSON array.

    Raises:
        HTTPException: 400 on malformed XML or a structural conversion error.
    """
    parser = AmlParser(content)
    try:
        document = parser.parse()
    except AmlParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if parser.warnings:
        logger.info("AML conversion recovered from %d irregularities", len(parser.warnings))
    return document.to_json()


@router.post("/to-aml")
async def to_aml(request: Request) -> Response:
    """Convert an FPB.JS JSON body to an AutomationML document."""
    body = await _read_body(request)
    content = convert_json_to_aml(body)
    return Response(content=content, media_type="application/xml; charset=utf-8")


@router.post("/to-json")
async def to_json(request: Request) -> JSONResponse:
    """Convert an AutomationML body to FPB.JS JSON."""
    body = await _read_body(request)
    return JSONResponse(content=convert_aml_to_json(body))
