from __future__ import annotations

from typing import Protocol, Sequence


class LookupRepository(Protocol):
    def project_types(self) -> Sequence[dict]:
        raise NotImplementedError

    def project_statuses(self) -> Sequence[dict]:
        raise NotImplementedError

    def customers(self) -> Sequence[dict]:
        raise NotImplementedError

    def item_types(self) -> Sequence[dict]:
        raise NotImplementedError

    def unit_types(self) -> Sequence[dict]:
        raise NotImplementedError

    def users(self) -> Sequence[dict]:
        raise NotImplementedError

    def project_roles(self) -> Sequence[dict]:
        raise NotImplementedError

    def tasks(self) -> Sequence[dict]:
        raise NotImplementedError

    def task_categories(self) -> Sequence[dict]:
        raise NotImplementedError
