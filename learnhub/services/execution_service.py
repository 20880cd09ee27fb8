# learnhub/services/execution_service.py
"""
Proxy to the sandboxed code-execution service and task grading on top of it.
"""
import asyncio
from datetime import datetime, timezone
from typing import List, Optional
import httpx
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.config import settings
from learnhub.core.exceptions import BadGatewayError, BadRequestError, NotFoundError
from learnhub.crud.crud_task import task as crud_task
from learnhub.models.learning import Task, TaskTest, TestResult
from learnhub.schemas.execution import (
    ExecutionFile, ExecutionRequest, ExecutionResponse, TestResultsSummary
)
from loguru import logger

SOURCE_FILE_NAME = "main"


def build_request(
    code: str,
    *,
    stdin: str = "",
    language: Optional[str] = None,
    version: Optional[str] = None,
    task: Optional[Task] = None,
) -> ExecutionRequest:
    return ExecutionRequest(
        language=language or settings.EXECUTION_LANGUAGE,
        version=version or settings.EXECUTION_VERSION,
        files=[ExecutionFile(name=SOURCE_FILE_NAME, content=code)],
        stdin=stdin,
        compile_timeout=task.compile_timeout if task else None,
        run_timeout=task.run_timeout if task else None,
        compile_memory_limit=task.compile_memory_limit if task else None,
        run_memory_limit=task.run_memory_limit if task else None,
    )


async def execute(request: ExecutionRequest, client: httpx.AsyncClient) -> ExecutionResponse:
    """One call to the execution service. Raises on HTTP errors and malformed bodies."""
    response = await client.post(
        settings.EXECUTION_SERVICE_URL,
        json=request.model_dump(exclude_none=True),
        timeout=settings.EXECUTION_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    return ExecutionResponse.model_validate(response.json())


def is_passed(result: ExecutionResponse, expected_output: str) -> bool:
    return result.run.code == 0 and result.run.output.strip() == expected_output.strip()


async def execute_request(
    code: str,
    *,
    stdin: str = "",
    language: Optional[str] = None,
    version: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> ExecutionResponse:
    """Runs raw code once and returns the service's answer."""
    if not code or not code.strip():
        raise BadRequestError("Code must not be empty")
    request = build_request(code, stdin=stdin, language=language, version=version)
    try:
        if client is not None:
            return await execute(request, client)
        async with httpx.AsyncClient() as http:
            return await execute(request, http)
    except (httpx.HTTPError, ValueError, ValidationError) as e:
        logger.error(f"Code execution request failed: {e.__class__.__name__}: {e}")
        raise BadGatewayError("Code execution service failed")


async def _run_test(
    client: httpx.AsyncClient, *, user_id: str, task: Task, test: TaskTest, code: str
) -> TestResult:
    request = build_request(code, stdin=test.input, task=task)
    try:
        result = await asyncio.wait_for(execute(request, client), timeout=settings.EXECUTION_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.warning(f"Test {test.id} of task {task.id} timed out")
        return TestResult(user_id=user_id, task_id=task.id, task_test_id=test.id, passed=False,
                          stdout="", stderr="Execution timed out")
    except Exception as e:
        # one broken test must not abort the run
        logger.warning(f"Test {test.id} of task {task.id} failed to execute: {e.__class__.__name__}: {e}")
        return TestResult(user_id=user_id, task_id=task.id, task_test_id=test.id, passed=False,
                          stdout="", stderr=str(e) or e.__class__.__name__)

    return TestResult(
        user_id=user_id,
        task_id=task.id,
        task_test_id=test.id,
        passed=is_passed(result, test.output),
        stdout=result.run.stdout,
        stderr=result.run.stderr,
    )


async def execute_tests_for_task(
    db: AsyncSession,
    *,
    user_id: str,
    task_id: int,
    code: str,
    client: Optional[httpx.AsyncClient] = None,
) -> TestResultsSummary:
    """
    Runs `code` against every test of the task concurrently, stores one result
    per test (replacing the previous run) and returns the pass count.
    """
    if not code or not code.strip():
        raise BadRequestError("Code must not be empty")
    db_task = await crud_task.get(db, id=task_id)
    if db_task is None:
        raise NotFoundError(f"Task with ID {task_id} not found")

    tests = list(db_task.tests)
    if client is not None:
        results = await _run_all(client, user_id=user_id, task=db_task, tests=tests, code=code)
    else:
        async with httpx.AsyncClient() as http:
            results = await _run_all(http, user_id=user_id, task=db_task, tests=tests, code=code)

    execution_date = datetime.now(timezone.utc).replace(tzinfo=None)
    for row in results:
        row.execution_date = execution_date
    await crud_task.replace_results(db, user_id=user_id, task_id=task_id, results=results)

    passed = sum(1 for row in results if row.passed)
    logger.info(f"User {user_id} passed {passed}/{len(results)} tests of task {task_id}")
    return TestResultsSummary(
        task_id=task_id,
        passed_tests=passed,
        total_tests=len(results),
        execution_date=execution_date,
    )


async def _run_all(
    client: httpx.AsyncClient, *, user_id: str, task: Task, tests: List[TaskTest], code: str
) -> List[TestResult]:
    return list(await asyncio.gather(
        *(_run_test(client, user_id=user_id, task=task, test=test, code=code) for test in tests)
    ))


async def get_results(db: AsyncSession, *, user_id: str, task_id: int) -> List[TestResult]:
    return await crud_task.get_results(db, user_id=user_id, task_id=task_id)
