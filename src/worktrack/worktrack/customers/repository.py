from __future__ import annotations

from typing import Protocol, Sequence

from .model import Customer


class CustomerRepository(Protocol):
    def list_all(self) -> Sequence[Customer]:
        raise NotImplementedError

    def create(self, customer: Customer) -> int:
        raise NotImplementedError

    def update(self, customer_id: int, customer: Customer) -> bool:
        raise NotImplementedError

    def exists(self, customer_id: int) -> bool:
        raise NotImplementedError

    def delete(self, customer_id: int) -> bool:
        raise NotImplementedError
