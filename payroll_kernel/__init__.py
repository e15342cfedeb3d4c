"""
Payroll Kernel

Shared foundations for the payroll engine:
- Typed exceptions with machine-readable codes
- Structured JSON logging with request-scoped context
- SQLAlchemy declarative base, engine and session scope
- ORM immutability enforcement for finalized payroll
- Injectable clock and workflow value objects
"""

__version__ = "0.1.0"
