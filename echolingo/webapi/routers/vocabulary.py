"""Lookup HTTP routes."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ... import config_manager as cfg
from ... import logging_manager as log_mgr
from ...errors import EcholingoError, ValidationError
from ...llm_client import LLMClient
from ...services import lookup
from ..dependencies import get_llm_client, get_settings
from ..errors import ApiError
from ..schemas import LookupRequest

logger = log_mgr.get_logger().getChild("webapi.vocabulary")

router = APIRouter(prefix="/api", tags=["vocabulary"])

LOOKUP_FAILED_MESSAGE = "Failed to generate vocabulary or idiom information"


@router.post("/vocabulary", status_code=status.HTTP_200_OK)
def lookup_vocabulary(
    payload: LookupRequest,
    settings: cfg.EcholingoSettings = Depends(get_settings),
    client: LLMClient = Depends(get_llm_client),
) -> Dict[str, Any]:
    """Look up a word or idiom and return the normalised payload."""

    with log_mgr.log_context(mode=payload.mode, word=payload.word, stage="api.lookup"):
        try:
            return lookup.lookup_entry(
                payload.word,
                payload.mode,
                client=client,
                settings=settings,
            )
        except ValidationError:
            raise
        except EcholingoError as exc:
            logger.exception(
                "Lookup failed for %r",
                payload.word,
                extra={"event": "lookup.failed", "status": 500},
            )
            raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, LOOKUP_FAILED_MESSAGE) from exc


__all__ = ["router"]
