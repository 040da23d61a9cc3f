from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ..common.validators import normalize_string
from ..core.exceptions import NotFoundError, ValidationError
from ..database.capabilities import OptionalTables
from .model import CUSTOMER_FIELDS, Customer
from .repository import CustomerRepository


class CustomerService:
    def __init__(self, customers: CustomerRepository, optional: OptionalTables):
        self._customers = customers
        self._optional = optional

    @staticmethod
    def parse(payload: dict) -> Customer:
        values = {name: normalize_string(payload.get(name)) for name in CUSTOMER_FIELDS}
        if not all(values.values()):
            raise ValidationError("All fields are required")
        return Customer(**values)

    def list_customers(self) -> Sequence[Customer]:
        if not self._optional.available("customers"):
            return []
        return self._customers.list_all()

    def create(self, payload: dict) -> Customer:
        customer = self.parse(payload)
        customer_id = self._customers.create(customer)
        return replace(customer, id=customer_id)

    def update(self, customer_id: int, payload: dict) -> Customer:
        if customer_id <= 0:
            raise ValidationError("Invalid customer id")
        customer = self.parse(payload)
        # UPDATE counts changed rows, so 0 also means "saved without changes".
        if not self._customers.update(customer_id, customer) and not self._customers.exists(customer_id):
            raise NotFoundError("Customer not found")
        return replace(customer, id=customer_id)

    def delete(self, customer_id: int) -> None:
        if customer_id <= 0:
            raise ValidationError("Invalid customer id")
        if not self._customers.delete(customer_id):
            raise NotFoundError("Customer not found")
