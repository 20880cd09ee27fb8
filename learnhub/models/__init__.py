# learnhub/models/__init__.py
from .user import Role, User
from .provider import ProviderType, Provider, ProviderToken
from .token import Token
from .session import Session
from .learning import Course, Theme, Task, TaskTest, TestResult

__all__ = [
    "Role", "User",
    "ProviderType", "Provider", "ProviderToken",
    "Token", "Session",
    "Course", "Theme", "Task", "TaskTest", "TestResult",
]
