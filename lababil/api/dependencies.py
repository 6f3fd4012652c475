from fastapi import HTTPException, Request

from ..context import AppContext
from ..core.results import OperationResult


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def raise_for_result(result: OperationResult) -> None:
    """Turn a failed core result into the matching HTTP error"""
    if result.ok:
        return
    raise HTTPException(status_code=result.error.status_code, detail=result.error.message)
