"""
Front Office Django adapter.
Transaction glue over the framework-free front office engine.
"""

from adapters.django_orm.unit_of_work import DjangoUnitOfWork

__all__ = ["DjangoUnitOfWork"]
