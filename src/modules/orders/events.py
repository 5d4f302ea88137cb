"""Domain events raised by the order lifecycle."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    buyer_id: str = ""


@dataclass(frozen=True)
class OrderUpdatedByAdmin(DomainEvent):
    old_status: str = ""
    new_status: str = ""
    delivery_option: str = ""


@dataclass(frozen=True)
class OrderReceiptConfirmed(DomainEvent):
    buyer_id: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    old_status: str = ""
