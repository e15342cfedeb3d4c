"""
Payroll Modules.

Thin orchestration layers over the payroll kernel, engines and
configuration.  Each module contains:
- Domain models (the nouns)
- ORM persistence models
- Workflows (state machines)
- Configuration schemas (settings)
- Selectors and a service facade

Modules:
- Payroll: employees, pay calculation, payroll runs and records
"""

from payroll_modules import payroll

__all__ = ["payroll"]
