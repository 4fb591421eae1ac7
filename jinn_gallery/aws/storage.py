from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from decimal import Decimal
from boto3.dynamodb.conditions import Attr
from ..core.models import GalleryRecord, NewGalleryItem, NewUser, User
from ..store.base import GalleryStore, newest_first
from .clients import gallery_table as gallery_table_factory, users_table as users_table_factory

"""DynamoDB-backed store for users and gallery records.

Both tables use a numeric ``id`` hash key. The item with ``id = 0`` in each
table is the sequence counter and is never returned as a record.
"""

COUNTER_ID = 0


def _next_id(table) -> int:
    # ADD is atomic, so concurrent writers never receive the same id
    resp = table.update_item(
        Key={"id": COUNTER_ID},
        UpdateExpression="ADD seq :one",
        ExpressionAttributeValues={":one": 1},
        ReturnValues="UPDATED_NEW",
    )
    return int(resp["Attributes"]["seq"])


def _scan(table, filter_expr) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    exclusive_start_key = None
    while True:
        params: Dict[str, Any] = {"FilterExpression": filter_expr}
        if exclusive_start_key is not None:
            params["ExclusiveStartKey"] = exclusive_start_key

        resp = table.scan(**params)
        items.extend(resp.get("Items", []))
        exclusive_start_key = resp.get("LastEvaluatedKey")
        if not exclusive_start_key:
            break
    return items


def _plain(item: Dict[str, Any]) -> Dict[str, Any]:
    """DynamoDB hands numbers back as Decimal; records want ints."""
    return {k: int(v) if isinstance(v, Decimal) else v for k, v in item.items()}


def _to_record(item: Dict[str, Any]) -> GalleryRecord:
    data = _plain(item)
    data["created_at"] = datetime.fromisoformat(data["created_at"])
    return GalleryRecord(**data)


def _to_user(item: Dict[str, Any]) -> User:
    return User(**_plain(item))


class DynamoStore(GalleryStore):
    def __init__(self, gallery_table=None, users_table=None) -> None:
        self._gallery = gallery_table or gallery_table_factory()
        self._users = users_table or users_table_factory()

    def create_user(self, new_user: NewUser) -> User:
        user = User(id=_next_id(self._users), **new_user.model_dump())
        item = {k: v for k, v in user.model_dump().items() if v is not None}
        self._users.put_item(Item=item)
        return user

    def get_user(self, user_id: int) -> Optional[User]:
        if user_id == COUNTER_ID:
            return None
        item = self._users.get_item(Key={"id": user_id}).get("Item")
        return _to_user(item) if item else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        items = _scan(self._users, Attr("id").gt(COUNTER_ID) & Attr("username").eq(username))
        return _to_user(items[0]) if items else None

    def create_gallery_item(self, item: NewGalleryItem) -> GalleryRecord:
        record = GalleryRecord(
            id=_next_id(self._gallery),
            created_at=datetime.now(timezone.utc),
            **item.model_dump(),
        )
        row = record.model_dump()
        row["created_at"] = record.created_at.isoformat()
        self._gallery.put_item(Item=row)
        return record

    def get_gallery_items(self, user_id: Optional[int] = None) -> List[GalleryRecord]:
        filter_expr = Attr("id").gt(COUNTER_ID)
        if user_id is not None:
            filter_expr = filter_expr & Attr("user_id").eq(user_id)
        return newest_first([_to_record(i) for i in _scan(self._gallery, filter_expr)])

    def get_gallery_item(self, item_id: int) -> Optional[GalleryRecord]:
        if item_id == COUNTER_ID:
            return None
        item = self._gallery.get_item(Key={"id": item_id}).get("Item")
        return _to_record(item) if item else None
