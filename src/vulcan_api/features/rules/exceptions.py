"""Rule-specific exceptions."""

from vulcan_api.core.errors import RuleLockedError
from vulcan_api.core.rbac import RuleNotFoundError

__all__ = ["RuleLockedError", "RuleNotFoundError"]
