"""Unified error codes and custom exceptions.

Every error carries a numeric code, a stable string `error` that transports
can switch on, and an HTTP status.

Error code ranges:
  1xxx: Account
  2xxx: Mining
  3xxx: Purchase
  4xxx: Referral
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        error: str = "internal_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.error = error
        self.details = details
        super().__init__(message)


# --- 1xxx: Account ---

class AccountNotFoundError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(
            1001, f"Account not found: {account_id}", 404, error="user_not_found"
        )


class MissingAccountIdError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Account id is required", 400, error="id_required")


class NoFieldsToUpdateError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "No fields to update", 400, error="no_fields_to_update")


class AccountIdTooLongError(AppError):
    def __init__(self, max_length: int) -> None:
        super().__init__(
            1004,
            f"Account id must be at most {max_length} characters",
            400,
            error="id_too_long",
        )


# --- 2xxx: Mining ---

class CooldownError(AppError):
    def __init__(self, retry_after_seconds: int) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            2001,
            f"Mining is cooling down, retry after {retry_after_seconds}s",
            429,
            error="cooldown",
            details={"retry_after_seconds": retry_after_seconds},
        )


# --- 3xxx: Purchase ---

class InvalidQuantityError(AppError):
    def __init__(self, quantity: int, message: str | None = None) -> None:
        super().__init__(
            3001,
            message or f"Quantity must be a positive 64-bit integer, got {quantity}",
            400,
            error="invalid_quantity",
        )


class InvalidCostError(AppError):
    def __init__(self, unit_cost: int, quantity: int | None = None) -> None:
        if quantity is None:
            message = f"Unit cost must be a non-negative 64-bit integer, got {unit_cost}"
        else:
            message = f"Total cost of {quantity} x {unit_cost} exceeds the coin range"
        super().__init__(3002, message, 400, error="invalid_cost")


class InvalidAssetError(AppError):
    def __init__(self) -> None:
        super().__init__(3003, "Asset id is required", 400, error="invalid_asset")


class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            3004,
            f"Insufficient funds: required {required} coins, available {available} coins",
            400,
            error="insufficient_funds",
            details={
                "required": required,
                "available": available,
                "shortfall": required - available,
            },
        )


# --- 4xxx: Referral ---

class InviterNotFoundError(AppError):
    def __init__(self, referrer_id: str) -> None:
        super().__init__(
            4001, f"Inviter not found: {referrer_id}", 404, error="inviter_not_found"
        )


class SelfReferralError(AppError):
    def __init__(self) -> None:
        super().__init__(4002, "Accounts cannot refer themselves", 400, error="self_referral")


class AlreadyReferredError(AppError):
    def __init__(self, referred_id: str) -> None:
        super().__init__(
            4003,
            f"Account {referred_id} was already referred by another inviter",
            409,
            error="already_referred",
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500, error="internal_error")
