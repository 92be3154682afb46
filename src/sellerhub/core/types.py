"""Core type definitions shared across all SellerHub modules."""

from __future__ import annotations

from enum import StrEnum


class FormMode(StrEnum):
    """How an onboarding form was opened.

    ADD creates a new company, EDIT updates a saved one, VIEW is read-only.
    """

    ADD = "add"
    EDIT = "edit"
    VIEW = "view"
