"""
Payroll Configuration Schema.

Defines the structure and defaults for payroll calculation settings.
Tax rates are not here: they live in versioned tax table sets loaded
through ``payroll_config.get_tax_tables``.
"""

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Self

from payroll_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.config")


@dataclass
class PayrollConfig:
    """
    Configuration schema for the payroll module.

    Field defaults represent common US practice (FLSA time-and-a-half):

        config = PayrollConfig(
            double_time_multiplier=Decimal("2.0"),
            infer_frequency_from_period=False,
        )
    """

    overtime_multiplier: Decimal = Decimal("1.5")
    double_time_multiplier: Decimal = Decimal("2.0")

    # Employees without a stored pay frequency get one inferred from the
    # period length.  Disable to make a missing frequency an error.
    infer_frequency_from_period: bool = True

    tax_jurisdiction: str = "US-FED"
    tax_config_dir: Path | None = None

    def __post_init__(self):
        if self.overtime_multiplier < Decimal("1"):
            raise ValueError(
                f"overtime_multiplier must be at least 1, got {self.overtime_multiplier}"
            )
        if self.double_time_multiplier < self.overtime_multiplier:
            raise ValueError(
                "double_time_multiplier cannot be below overtime_multiplier "
                f"({self.double_time_multiplier} < {self.overtime_multiplier})"
            )
        if not self.tax_jurisdiction:
            raise ValueError("tax_jurisdiction is required")

        logger.info(
            "payroll_config_initialized",
            extra={
                "overtime_multiplier": str(self.overtime_multiplier),
                "double_time_multiplier": str(self.double_time_multiplier),
                "infer_frequency_from_period": self.infer_frequency_from_period,
                "tax_jurisdiction": self.tax_jurisdiction,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard US defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a dictionary (e.g., loaded from YAML)."""
        kwargs = dict(data)
        for key in ("overtime_multiplier", "double_time_multiplier"):
            if key in kwargs:
                kwargs[key] = Decimal(str(kwargs[key]))
        if kwargs.get("tax_config_dir") is not None:
            kwargs["tax_config_dir"] = Path(kwargs["tax_config_dir"])
        return cls(**kwargs)
