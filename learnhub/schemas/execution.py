# learnhub/schemas/execution.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime


# --- Code execution service contract ---
class ExecutionFile(BaseModel):
    name: str
    content: str


class ExecutionRequest(BaseModel):
    language: str
    version: str
    files: List[ExecutionFile]
    stdin: str = ""
    compile_timeout: Optional[int] = None
    run_timeout: Optional[int] = None
    compile_memory_limit: Optional[int] = None
    run_memory_limit: Optional[int] = None


class ExecutionResult(BaseModel):
    stdout: str = ""
    stderr: str = ""
    output: str = ""
    code: Optional[int] = None
    signal: Optional[str] = None


class ExecutionResponse(BaseModel):
    language: Optional[str] = None
    version: Optional[str] = None
    run: ExecutionResult
    compile: Optional[ExecutionResult] = None
# --- End contract ---


class CheckExecuteRequest(BaseModel):
    code: str
    language: Optional[str] = None
    version: Optional[str] = None
    stdin: str = ""


class ExecuteTaskRequest(BaseModel):
    code: str


class TestResultsSummary(BaseModel):
    __test__ = False

    task_id: int
    passed_tests: int
    total_tests: int
    execution_date: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TestResult(BaseModel):
    __test__ = False

    id: int
    task_id: int
    task_test_id: int
    passed: bool
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    execution_date: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
