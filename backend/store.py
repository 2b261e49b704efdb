import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import Any, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer
from botocore.exceptions import BotoCoreError, ClientError

from backend.config import Settings
from backend.errors import StoreError

logger = logging.getLogger(__name__)

_deserializer = TypeDeserializer()


@dataclass(frozen=True)
class CounterRecord:
    id: str
    # As stored: Decimal for a number attribute, None when missing. Validation is the handler's job.
    count: Any = None
    last_updated: Optional[str] = None

    def to_item(self):
        return {
            "id": {"S": self.id},
            "count": {"N": str(self.count)},
            "lastUpdated": {"S": self.last_updated},
        }

    @classmethod
    def from_item(cls, item):
        data = {k: _deserializer.deserialize(v) for k, v in item.items()}
        return cls(id=data["id"], count=data.get("count"), last_updated=data.get("lastUpdated"))


class StoreClient:
    """Reads and writes counter records in one DynamoDB table.

    Every botocore failure is re-raised as StoreError. Nothing is retried here.
    """

    def __init__(self, table_name: str, client=None):
        self.table_name = table_name
        self.client = client or boto3.client("dynamodb")

    def get(self, counter_id: str) -> Optional[CounterRecord]:
        try:
            resp = self.client.get_item(
                TableName=self.table_name,
                Key={"id": {"S": counter_id}},
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(str(e)) from e
        item = resp.get("Item")
        return CounterRecord.from_item(item) if item else None

    def put(self, record: CounterRecord) -> None:
        try:
            self.client.put_item(TableName=self.table_name, Item=record.to_item())
        except (ClientError, BotoCoreError) as e:
            raise StoreError(str(e)) from e

    def increment(self, counter_id: str, last_updated: str) -> int:
        """Atomic alternative to get/put: a single server-side add."""
        try:
            resp = self.client.update_item(
                TableName=self.table_name,
                Key={"id": {"S": counter_id}},
                UpdateExpression="SET #c = if_not_exists(#c, :zero) + :one, #u = :now",
                ExpressionAttributeNames={"#c": "count", "#u": "lastUpdated"},
                ExpressionAttributeValues={
                    ":zero": {"N": "0"},
                    ":one": {"N": "1"},
                    ":now": {"S": last_updated},
                },
                ReturnValues="UPDATED_NEW",
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(str(e)) from e
        return int(Decimal(resp["Attributes"]["count"]["N"]))


@lru_cache(maxsize=1)
def get_store() -> StoreClient:
    settings = Settings.from_env()
    logger.debug("creating store client for table %s", settings.table_name)
    return StoreClient(settings.table_name)
