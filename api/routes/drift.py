"""
Drift routes for IndexDrift.

Checks a definition against the configured snapshot source.
"""
import json

from fastapi import APIRouter, Depends, HTTPException

from core import parse_definition_content, DefinitionError, NodeStructureError
from services import DriftChecker, RemoteServiceError, build_snapshot_source
from api.schemas import DriftRequest, DriftResponse
from api.routes.comparison import build_comparison_response

router = APIRouter()


def get_drift_checker():
    """Drift checker over the configured snapshot source, closed after the request."""
    try:
        source = build_snapshot_source()
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))

    try:
        yield DriftChecker(source)
    finally:
        if hasattr(source, "close"):
            source.close()


@router.post("", response_model=DriftResponse)
def check_drift(request: DriftRequest, checker: DriftChecker = Depends(get_drift_checker)):
    """
    Compare a definition with the remote one of the same name.
    """
    try:
        definition = parse_definition_content(
            json.dumps(request.definition),
            "<request>",
            request.index_name
        )
        report = checker.check(definition)
    except (DefinitionError, NodeStructureError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RemoteServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return DriftResponse(index_name=definition.name, **build_comparison_response(report))
