"""Pre-run capital checks."""

from .capital import CapitalCheckResult, check_capital_requirement, check_first_observation

__all__ = ["CapitalCheckResult", "check_capital_requirement", "check_first_observation"]
