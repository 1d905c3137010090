"""Anki CSV download route."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ...services.export import build_anki_export
from ...services.lexicon_store import LexiconStore
from ..dependencies import get_lexicon_store

router = APIRouter(prefix="/api", tags=["export"])


@router.get("/export-anki", response_class=Response)
def export_anki(
    layout: Optional[str] = Query(default=None),
    store: LexiconStore = Depends(get_lexicon_store),
) -> Response:
    """Download entries saved in the last seven days as CSV."""

    export = build_anki_export(store, layout=layout)
    return Response(
        content=export.content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


__all__ = ["router"]
