"""Customers: types, factories and the manager that schedules them.

The manager lives in ``nursery.customers.manager`` and is imported from
there directly.
"""

from nursery.customers.customer import (
    Customer,
    CustomerType,
    Intent,
    Interaction,
    RegularCustomer,
    RobberCustomer,
    VipCustomer,
)
from nursery.customers.factory import (
    CustomerFactory,
    FixedCustomerFactory,
    RandomCustomerFactory,
    create_customer_factory,
)

__all__ = [
    "Customer",
    "CustomerFactory",
    "CustomerType",
    "FixedCustomerFactory",
    "Intent",
    "Interaction",
    "RandomCustomerFactory",
    "RegularCustomer",
    "RobberCustomer",
    "VipCustomer",
    "create_customer_factory",
]
