"""
Outcomes of payment and refund requests.

Every answer a client can receive is an ``Outcome`` member returned as data
by the processors. Only broken internal invariants are raised, as
``InternalConsistencyError``, and they never reach the client in detail.
"""

import enum
from typing import Optional


class ErrorCategory(str, enum.Enum):
    INPUT_VALIDATION = "input_validation"
    BUSINESS_DECLINE = "business_decline"
    UPSTREAM_FAILURE = "upstream_failure"
    CONFLICT_VIOLATION = "conflict_violation"


class Outcome(enum.Enum):
    # payments
    APPROVED = ("approved", 201, None, None)
    DECLINED_INSUFFICIENT_FUNDS = ("insufficient_funds", 402, ErrorCategory.BUSINESS_DECLINE, "Payment Required")
    DECLINED_INVALID_ACCOUNT = ("invalid_account_number", 403, ErrorCategory.BUSINESS_DECLINE, "Forbidden")
    FAILED_SERVICE_UNAVAILABLE = ("service_unavailable", 503, ErrorCategory.UPSTREAM_FAILURE, "Service unavailable")
    FAILED_INTERNAL_ERROR = ("internal_error", 500, ErrorCategory.UPSTREAM_FAILURE, "Internal Error")
    REJECTED_NEGATIVE = ("rejected_negative", 400, ErrorCategory.INPUT_VALIDATION, "Amount shouldn't be negative")
    REJECTED_ZERO = ("rejected_zero", 204, ErrorCategory.INPUT_VALIDATION, "Amount shouldn't be 0")
    REJECTED_FORMAT = ("rejected_format", 422, ErrorCategory.INPUT_VALIDATION, "Bad Card Number format")
    DUPLICATE_CARD = ("duplicate_card", 422, ErrorCategory.CONFLICT_VIOLATION, "card_number already used")
    # refunds
    CREATED = ("created", 201, None, None)
    NOT_REFUNDABLE = ("not_refundable", 404, ErrorCategory.INPUT_VALIDATION, "payment doesn't exist or isn't approved")
    INVALID_REFUND_AMOUNT = ("invalid_refund_amount", 422, ErrorCategory.INPUT_VALIDATION, "refund amount must be positive")
    EXCESSIVE_REFUND = ("excessive_refund", 422, ErrorCategory.CONFLICT_VIOLATION, "excessive refund amount requested")

    def __init__(self, code: str, status_code: int, category: Optional[ErrorCategory], message: Optional[str]):
        self.code = code
        self.status_code = status_code
        self.category = category
        self.message = message

    @property
    def is_error(self) -> bool:
        return self.category is not None


class InternalConsistencyError(Exception):
    """Raised when an invariant of the core is violated; maps to a generic 500."""

    def __init__(self, message: str):
        super().__init__(message)
