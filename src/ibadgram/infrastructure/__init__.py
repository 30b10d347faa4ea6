from .unit_of_work import SQLAlchemyUnitOfWork, UnitOfWork

__all__ = ["SQLAlchemyUnitOfWork", "UnitOfWork"]
