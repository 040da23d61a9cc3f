import pytest

from src.worktrack.worktrack.core.exceptions import ValidationError
from src.worktrack.worktrack.items.model import item_code, item_label
from src.worktrack.worktrack.items.service import ItemService


def test_item_code_format():
    assert item_code("BOX", 12, 340, 5, 2) == "BOX-12.340-5-2"


def test_item_code_without_category():
    assert item_code("", 12, 340, 5, 1) == "NA-12.340-5-1"


def test_item_label():
    assert item_label("BOX", "Folder", 3) == "BOX Folder3"
    assert item_label("", "Folder", 3) == "Folder3"


class RecordingItems:
    def __init__(self):
        self.requests = []

    def create_batch(self, request):
        self.requests.append(request)
        return []


def test_batch_request_parsing():
    items = RecordingItems()
    service = ItemService(items, optional=None)

    service.create_batch({"projectId": "12", "categoryId": 3, "count": "0"})
    service.create_batch({"projectId": 12})

    assert (items.requests[0].category_id, items.requests[0].count) == (3, 1)
    assert items.requests[1].count == 1
    with pytest.raises(ValidationError):
        service.create_batch({"projectId": 12, "count": "many"})
    with pytest.raises(ValidationError):
        service.create_batch({"count": 2})
