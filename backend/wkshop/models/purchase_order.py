from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Numeric, ForeignKey, DateTime, text
from typing import Optional

from .permission import Base


class PurchaseOrder(Base):
    __tablename__ = 'purchase_orders'
    # Order status values
    STATUS_CONFIRMED = '발주확인'
    STATUS_PENDING = '발주 대기'
    STATUS_CANCELLED = '취소됨'
    ALL_STATUSES = (STATUS_CONFIRMED, STATUS_PENDING, STATUS_CANCELLED)
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    po_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    back_margin: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    commission_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    commission_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=0)
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    warehouse_shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    advance_payment_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=0)
    order_status: Mapped[str] = mapped_column(String(32), nullable=False, default=STATUS_PENDING, index=True)
    created_by: Mapped[Optional[str]] = mapped_column(ForeignKey('admin_accounts.id'), nullable=True)
    updated_by: Mapped[Optional[str]] = mapped_column(ForeignKey('admin_accounts.id'), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=text('CURRENT_TIMESTAMP'), server_onupdate=text('CURRENT_TIMESTAMP'))
