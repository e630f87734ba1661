"""
Comparison routes for IndexDrift.

Compares documents supplied directly by the caller; no snapshot source involved.
"""
from typing import Optional

from fastapi import APIRouter, UploadFile, File, HTTPException

from config import settings
from core import compare_documents, parse_json_document, ChangeReport, DefinitionError, NodeStructureError
from api.schemas import ComparisonRequest, ComparisonResponse, ChangeSchema

router = APIRouter()


def build_comparison_response(report: ChangeReport) -> dict:
    """Shape a ChangeReport for ComparisonResponse and its subclasses."""
    return {
        "exists": report.exists,
        "has_differences": report.has_differences,
        "change_count": report.change_count,
        "message": report.message,
        "local_hash": report.local_hash,
        "remote_hash": report.remote_hash,
        "fingerprint": report.fingerprint(),
        "changes": [ChangeSchema(**c.to_dict()) for c in report.differences],
        "lines": report.lines(),
    }


@router.post("", response_model=ComparisonResponse)
async def compare_configs(request: ComparisonRequest):
    """
    Compare a local document with a remote snapshot and return differences.
    """
    try:
        report = compare_documents(request.local, request.remote, max_depth=settings.MAX_DOCUMENT_DEPTH)
    except NodeStructureError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ComparisonResponse(**build_comparison_response(report))


@router.post("/files")
async def compare_files(
    local_file: UploadFile = File(...),
    remote_file: Optional[UploadFile] = File(None)
):
    """
    Compare two uploaded JSON files. Omitting the remote file reports it as missing.
    """
    if not local_file.filename.lower().endswith('.json'):
        raise HTTPException(status_code=400, detail="Local file must be JSON")
    if remote_file is not None and not remote_file.filename.lower().endswith('.json'):
        raise HTTPException(status_code=400, detail="Remote file must be JSON")

    try:
        local_doc = parse_json_document((await local_file.read()).decode('utf-8'), local_file.filename)
        remote_doc = None
        if remote_file is not None:
            remote_doc = parse_json_document((await remote_file.read()).decode('utf-8'), remote_file.filename)
        report = compare_documents(local_doc, remote_doc, max_depth=settings.MAX_DOCUMENT_DEPTH)
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Files must be UTF-8 encoded")
    except (DefinitionError, NodeStructureError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    response = ComparisonResponse(**build_comparison_response(report)).model_dump(by_alias=True)
    response["local_file"] = local_file.filename
    response["remote_file"] = remote_file.filename if remote_file is not None else None
    response["report"] = generate_text_report(local_file.filename, response["remote_file"], report)
    return response


def generate_text_report(local_filename: str, remote_filename: Optional[str], report: ChangeReport) -> str:
    """Generate a plain-text report for a manual comparison."""
    lines = [
        "=" * 70,
        "INDEX DEFINITION COMPARISON REPORT",
        f"{settings.APP_NAME} v{settings.APP_VERSION}",
        "=" * 70,
        "",
        f"Local File:       {local_filename}",
        f"Remote File:      {remote_filename or '(none)'}",
        "",
    ]

    if not report.exists:
        lines.extend([
            "-" * 40,
            "RESULT: REMOTE DEFINITION MISSING",
            "-" * 40,
            "",
            report.message,
        ])
    elif not report.has_differences:
        lines.extend([
            "-" * 40,
            "RESULT: NO DIFFERENCES FOUND",
            "-" * 40,
            "",
            report.message,
        ])
    else:
        lines.extend([
            "-" * 40,
            f"RESULT: {report.change_count} DIFFERENCE(S) FOUND",
            "-" * 40,
            "",
        ])
        lines.extend(report.lines())

    lines.extend([
        "",
        "=" * 70,
        "END OF REPORT",
        "=" * 70,
    ])

    return "\n".join(lines)
