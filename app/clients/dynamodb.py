"""
DynamoDB-backed key-value store relying on the table's native TTL attribute.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.clients.kv_store import KeyValueStoreError
from app.core.config import StoreSettings


class DynamoDBKeyValueStore:
    """Store values as ``{pk, value, expires_at_epoch}`` items.

    The table should have TTL enabled on ``expires_at_epoch``. DynamoDB removes
    expired items lazily, so reads filter them as well.
    """

    TTL_ATTRIBUTE = "expires_at_epoch"

    def __init__(
        self,
        settings: StoreSettings,
        table: Any = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._clock = clock
        if table is None:
            if not settings.dynamodb_table_name:
                raise KeyValueStoreError(
                    "KV_DYNAMODB_TABLE must be set for the dynamodb backend."
                )
            try:
                resource = boto3.resource("dynamodb", region_name=settings.region_name)
            except BotoCoreError as exc:
                raise KeyValueStoreError("DynamoDB client could not be created") from exc
            table = resource.Table(settings.dynamodb_table_name)
        self._table = table

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        item = {
            "pk": key,
            "value": value,
            self.TTL_ATTRIBUTE: int(self._clock()) + int(ttl_seconds),
        }
        try:
            self._table.put_item(Item=item)
        except (BotoCoreError, ClientError) as exc:
            raise KeyValueStoreError(f"DynamoDB write failed for key {key!r}") from exc

    def get(self, key: str) -> Optional[str]:
        try:
            response = self._table.get_item(Key={"pk": key}, ConsistentRead=True)
        except (BotoCoreError, ClientError) as exc:
            raise KeyValueStoreError(f"DynamoDB read failed for key {key!r}") from exc
        item = response.get("Item")
        if not item:
            return None
        if int(item.get(self.TTL_ATTRIBUTE, 0)) <= self._clock():
            return None
        return item.get("value")


__all__ = ["DynamoDBKeyValueStore"]
