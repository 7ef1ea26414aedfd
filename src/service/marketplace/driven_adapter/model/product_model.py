from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.db_setting import Base


class ProductModel(Base):
    __tablename__ = 'product'
    __table_args__ = (
        Index('ix_product_status_auction_end', 'status', 'is_auction', 'auction_end_date'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('user.id'), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('category.id'), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default='')
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    condition: Mapped[str] = mapped_column(String(20), default='new', nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='active', nullable=False)
    is_auction: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    minimum_bid: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    # NULL until the first bid
    current_bid: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    buy_now_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    auction_end_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    specifications: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self):
        return f'<ProductModel(id={self.id}, title={self.title}, status={self.status})>'
