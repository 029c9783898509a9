"""
errors.py

Error taxonomy for the mortgage calculation engine.

- ValidationError: an input breaks a documented business constraint
  (down payment above price, term not offered, unknown county, ...).
  The caller fixes the input and retries.
- ComputationError: an arithmetic precondition of a formula is violated
  (principal <= 0, term <= 0, negative rate). This is a contract violation
  by the caller, not an out-of-range business value.

Legitimate edge outcomes (zero affordability, negative refinance savings,
break-even never reached) are NOT errors; they come back as flagged
fields on ordinary results.
"""

from typing import Any, Dict, Optional


class MortgageEngineError(Exception):
    """
    Base class for every error raised by the engine.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "field": self.field,
        }


class ValidationError(MortgageEngineError):
    pass


class ComputationError(MortgageEngineError):
    pass
