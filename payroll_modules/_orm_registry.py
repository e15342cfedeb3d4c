"""
Module ORM Registry (``payroll_modules._orm_registry``).

Responsibility
--------------
Ensure every module-level SQLAlchemy ORM model is imported so that
``Base.metadata`` holds its table definition before tables are created.

Also provides ``create_all_tables()`` -- the entry point that registers
the module ORM models and then creates every table.

Architecture position
---------------------
**Modules layer** -- utility.  Imports from ``payroll_modules`` packages and
from ``payroll_kernel.db.engine`` (allowed: modules -> kernel).
MUST NOT be imported by ``payroll_kernel``.

Usage
-----
Entrypoints and ``tests/conftest.py`` call ``create_all_tables()``.
"""


def import_all_orm_models() -> None:
    """Import every ``payroll_modules.*.orm`` module to register ORM models.

    This function is idempotent -- repeated calls are harmless.
    """
    import payroll_modules.payroll.orm  # noqa: F401


def create_all_tables() -> None:
    """Create all module ORM tables and register the immutability listeners.

    Preconditions:
        Engine must be initialized via ``init_engine_from_url()``.
    """
    from payroll_kernel.db.engine import create_tables

    import_all_orm_models()
    create_tables()
