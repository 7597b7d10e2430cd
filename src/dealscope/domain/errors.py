# src/dealscope/domain/errors.py
from __future__ import annotations


class DomainError(ValueError):
    """
    Raised when deal inputs cannot produce a defined metric.

    `kind` is always "InvalidInput" today; `field` names the input (or derived
    quantity) that made the computation undefined.
    """

    def __init__(self, field: str, message: str, *, kind: str = "InvalidInput") -> None:
        super().__init__(f"{kind}: {field} {message}")
        self.kind = kind
        self.field = field
        self.message = message
