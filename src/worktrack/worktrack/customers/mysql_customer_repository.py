from __future__ import annotations

from typing import Sequence

from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Customer
from .repository import CustomerRepository


class MySQLCustomerRepository(CustomerRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Customer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, state, county, contact_name, contact_email, contact_phone
                FROM customers
                ORDER BY id
                """
            )
            return [
                Customer(
                    id=int(r["id"]),
                    name=r.get("name") or "",
                    state=r.get("state") or "",
                    county=r.get("county") or "",
                    contact_name=r.get("contact_name") or "",
                    contact_email=r.get("contact_email") or "",
                    contact_phone=r.get("contact_phone") or "",
                )
                for r in fetchall(cur)
            ]

    def create(self, customer: Customer) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO customers(name, state, county, contact_name, contact_email, contact_phone)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    customer.name,
                    customer.state,
                    customer.county,
                    customer.contact_name,
                    customer.contact_email,
                    customer.contact_phone,
                ),
            )
            return int(cur.lastrowid)

    def update(self, customer_id: int, customer: Customer) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE customers
                SET name=%s, state=%s, county=%s, contact_name=%s, contact_email=%s, contact_phone=%s
                WHERE id=%s
                """,
                (
                    customer.name,
                    customer.state,
                    customer.county,
                    customer.contact_name,
                    customer.contact_email,
                    customer.contact_phone,
                    int(customer_id),
                ),
            )
            return cur.rowcount > 0

    def exists(self, customer_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM customers WHERE id=%s", (int(customer_id),))
            return fetchone(cur) is not None

    def delete(self, customer_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM customers WHERE id=%s", (int(customer_id),))
            return cur.rowcount > 0
