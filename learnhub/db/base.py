from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """
    Declarative base for every ORM model of the service.
    """
    pass
