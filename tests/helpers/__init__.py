"""
Test helpers for the DynamoDB mapper.

Sample models with table metadata used by the unit tests.
"""

from .models import Customer, Order, OrderStatus, Unmapped

__all__ = [
    'Customer',
    'Order',
    'OrderStatus',
    'Unmapped',
]
