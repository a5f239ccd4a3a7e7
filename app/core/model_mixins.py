"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    ActiveFlagMixin: Soft deactivation through an is_active flag
    MetadataMixin: Flexible JSON metadata storage

Usage:
    from core.models import BaseModel
    from core.model_mixins import ActiveFlagMixin, UUIDPrimaryKeyMixin

    class Room(UUIDPrimaryKeyMixin, ActiveFlagMixin, BaseModel):
        room_number = models.CharField(max_length=20)

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db import models

if TYPE_CHECKING:
    from typing import Any


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Fields:
        id: UUIDField as primary key (auto-generated)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class ActiveFlagMixin(models.Model):
    """
    Soft deactivation support.

    Ledger records are never deleted. Rows that should drop out of
    day-to-day queries are flagged inactive instead and stay available
    for audits and reconciliation.

    Fields:
        is_active: Whether the record takes part in normal queries
    """

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this record is active",
    )

    class Meta:
        abstract = True

    def deactivate(self) -> None:
        """Flag this record inactive and persist the flag."""
        self.is_active = False
        self.save(update_fields=["is_active", "updated_at"])


class MetadataMixin(models.Model):
    """
    Flexible JSON metadata storage.

    Fields:
        metadata: JSONField for arbitrary key-value data

    Usage:
        payment.set_meta("upp_risk_score", 42, save=False)
        payment.get_meta("upp_risk_score")  # 42
    """

    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Flexible key-value metadata storage",
    )

    class Meta:
        abstract = True

    def get_meta(self, key: str, default: Any = None) -> Any:
        """Get metadata value by key, or default when missing."""
        return (self.metadata or {}).get(key, default)

    def set_meta(self, key: str, value: Any, save: bool = True) -> None:
        """
        Set metadata value and optionally save.

        Args:
            key: Metadata key
            value: Value to store (must be JSON-serializable)
            save: Whether to save the model (default True)
        """
        if self.metadata is None:
            self.metadata = {}
        self.metadata[key] = value
        if save:
            self.save(update_fields=["metadata", "updated_at"])

    def update_meta(self, values: dict[str, Any], save: bool = True) -> None:
        """Merge several metadata keys at once."""
        if self.metadata is None:
            self.metadata = {}
        self.metadata.update(values)
        if save:
            self.save(update_fields=["metadata", "updated_at"])
