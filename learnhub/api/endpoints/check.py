# learnhub/api/endpoints/check.py
from typing import Any
from fastapi import APIRouter, Depends

from learnhub.api.dependencies import get_current_user
from learnhub.models.user import User as UserModel
from learnhub.schemas.execution import CheckExecuteRequest, ExecutionResponse
from learnhub.services import execution_service

router = APIRouter()


@router.post("/execute", response_model=ExecutionResponse)
async def execute_code(
    body: CheckExecuteRequest,
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    """Runs code once in the sandbox and returns its raw result."""
    return await execution_service.execute_request(
        body.code, stdin=body.stdin, language=body.language, version=body.version
    )
