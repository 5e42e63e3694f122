"""
Contact / join channel handler — league_site/channels/contact_handler.py
FastAPI router for the "join the league" form.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from league_site.pipeline.orchestrator import (
    SERVER_ERROR,
    ContactAccepted,
    ContactError,
    SubmissionOrchestrator,
    SubmissionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["contact"])


def get_orchestrator(request: Request) -> SubmissionOrchestrator:
    """The orchestrator is built at startup and kept on app.state."""
    return request.app.state.orchestrator


def _to_response(result: SubmissionResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code)
    return JSONResponse(result.body.model_dump(), status_code=result.status_code)


@router.post(
    "/contact",
    response_model=ContactAccepted,
    responses={
        204: {"description": "Submission silently dropped"},
        400: {"model": ContactError},
        500: {"model": ContactError},
        502: {"model": ContactError},
    },
)
async def submit_contact(
    request: Request,
    orchestrator: SubmissionOrchestrator = Depends(get_orchestrator),
) -> Response:
    """
    Accept a contact / join submission, email league staff and record it
    in the ledger. The body is free-form JSON; unknown fields are ignored.
    """
    try:
        payload = await request.json()
    except ValueError as exc:
        logger.warning("Contact payload is not valid JSON: %s", exc)
        return _to_response(SERVER_ERROR)

    return _to_response(await orchestrator.handle(payload))
