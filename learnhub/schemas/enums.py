# learnhub/schemas/enums.py
from enum import Enum


class RoleName(str, Enum):
    USER = "USER"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class ProviderTypeName(str, Enum):
    YANDEX = "YANDEX"


PRIVILEGED_ROLES = frozenset({RoleName.TEACHER, RoleName.ADMIN})
