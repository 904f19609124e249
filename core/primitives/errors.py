"""
Front Office Core — Domain Error Taxonomy
=========================================
Every rule violation inside the domain raises a subclass of
DomainError. Errors are raised synchronously and the aggregate that
raised them is left unchanged.

Categories:
    ValidationError          — bad input (also a ValueError)
    CurrencyMismatch         — Money arithmetic across currencies
    InvalidOperationForState — operation not allowed in current state
    NotFoundError            — referenced aggregate is missing
    DuplicateError           — uniqueness rule violated
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base error for all domain rule violations."""
    pass


# ── Validation ────────────────────────────────────────────────

class ValidationError(DomainError, ValueError):
    """Input failed validation."""

    def __init__(self, message: str, field: str = ""):
        self.field = field
        super().__init__(message)


class InvalidAmount(ValidationError):
    """Monetary amount is negative or not a number."""

    def __init__(self, amount: Any):
        self.amount = amount
        super().__init__(f"Invalid amount: {amount}. Amount cannot be negative.", "amount")


class InvalidFormat(ValidationError):
    """Value does not match the required format."""

    def __init__(self, field: str, value: Any, expected: str = ""):
        self.value = value
        self.expected = expected
        message = f"Invalid {field} format: '{value}'."
        if expected:
            message += f" Expected {expected}."
        super().__init__(message, field)


# ── Money ─────────────────────────────────────────────────────

class CurrencyMismatch(DomainError):
    """Arithmetic attempted between different currencies."""

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(
            f"Currency mismatch: {left} vs {right}. "
            f"Cross-currency operations require explicit conversion."
        )


# ── State ─────────────────────────────────────────────────────

class InvalidOperationForState(DomainError):
    """Operation is not permitted in the aggregate's current state."""

    def __init__(self, operation: str, current_state: Any, detail: str = ""):
        self.operation = operation
        self.current_state = current_state
        state = getattr(current_state, "value", current_state)
        message = detail or f"Cannot {operation} in state: {state}."
        super().__init__(message)


# ── Lookup / uniqueness ───────────────────────────────────────

class NotFoundError(DomainError):
    """Referenced aggregate does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found.")


class DuplicateError(DomainError):
    """A uniqueness rule was violated."""

    def __init__(self, entity: str, key: str, value: Any):
        self.entity = entity
        self.key = key
        self.value = value
        super().__init__(f"{entity} with {key} '{value}' already exists.")
