# models/sales.py

from sqlalchemy import Column, Date, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from salesboard.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    transaction_id = Column(String(50))
    date = Column(Date, nullable=True)

    customer_id = Column(String(50))
    customer_name = Column(String(255))
    phone_number = Column(String(20))
    gender = Column(String(10))
    age = Column(Integer, nullable=False, default=0)
    customer_region = Column(String(100))
    customer_type = Column(String(50))

    product_id = Column(String(50))
    product_name = Column(String(255))
    brand = Column(String(100))
    product_category = Column(String(100))
    tags = Column(Text)

    quantity = Column(Integer, nullable=False, default=0)
    price_per_unit = Column(Numeric(10, 2), nullable=False, default=0)
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    final_amount = Column(Numeric(12, 2), nullable=False, default=0)

    payment_method = Column(String(50))
    order_status = Column(String(50))
    delivery_type = Column(String(50))

    store_id = Column(String(50))
    store_location = Column(String(255))
    salesperson_id = Column(String(50))
    employee_name = Column(String(255))

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Lookup indexes for search, date range and the list filters
    __table_args__ = (
        Index("ix_sales_customer_name", "customer_name"),
        Index("ix_sales_phone_number", "phone_number"),
        Index("ix_sales_date", "date"),
        Index("ix_sales_customer_region", "customer_region"),
        Index("ix_sales_product_category", "product_category"),
        Index("ix_sales_payment_method", "payment_method"),
        Index("ix_sales_order_status", "order_status"),
        Index("ix_sales_delivery_type", "delivery_type"),
    )
