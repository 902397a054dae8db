"""Form validation package."""

from mengmeng_budget.validation.validator import TransactionFormValidator

__all__ = ["TransactionFormValidator"]
