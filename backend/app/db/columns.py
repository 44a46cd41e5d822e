"""
Custom column types.
"""
from sqlalchemy import Numeric
from sqlalchemy.types import TypeDecorator
from app.core.money import Money, to_decimal


class MoneyType(TypeDecorator):
    """Numeric(12, 2) column that reads and writes Money values."""
    impl = Numeric(12, 2)
    cache_ok = True
    
    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_decimal(value)
    
    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Money(value)
