# learnhub/schemas/learning.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


# --- Course ---
class CourseCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=32)
    description: Optional[str] = Field(None, max_length=65535)
    is_disable: bool = False


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=32)
    description: Optional[str] = Field(None, max_length=65535)
    is_disable: Optional[bool] = None


class Course(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_disable: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Theme ---
class ThemeCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=32)
    description: Optional[str] = Field(None, max_length=65535)
    course_id: int
    is_disable: bool = False


class ThemeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=32)
    description: Optional[str] = Field(None, max_length=65535)
    is_disable: Optional[bool] = None


class Theme(BaseModel):
    id: int
    course_id: int
    name: str
    description: Optional[str] = None
    is_disable: bool

    class Config:
        from_attributes = True


# --- Task ---
class TaskTestIn(BaseModel):
    input: str = Field(..., min_length=1)
    output: str = Field(..., min_length=1)


class TaskTest(TaskTestIn):
    id: int

    class Config:
        from_attributes = True


class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    run_timeout: int = Field(..., gt=0)
    run_memory_limit: int
    compile_timeout: int = Field(..., gt=0)
    compile_memory_limit: int
    theme_id: int
    is_disable: bool = False
    tests: List[TaskTestIn] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    run_timeout: Optional[int] = Field(None, gt=0)
    run_memory_limit: Optional[int] = None
    compile_timeout: Optional[int] = Field(None, gt=0)
    compile_memory_limit: Optional[int] = None
    is_disable: Optional[bool] = None
    # When given, replaces every existing test of the task
    tests: Optional[List[TaskTestIn]] = None


class Task(BaseModel):
    id: int
    theme_id: int
    name: str
    description: Optional[str] = None
    run_timeout: int
    run_memory_limit: int
    compile_timeout: int
    compile_memory_limit: int
    is_disable: bool
    tests: List[TaskTest] = []

    class Config:
        from_attributes = True
