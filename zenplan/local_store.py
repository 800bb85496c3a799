from __future__ import annotations

import json
import logging
from typing import Sequence, Type, TypeVar

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from zenplan.errors import MalformedLocalData
from zenplan.models import EntityModel, dump_collection
from zenplan.storage import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=EntityModel)


def decode_collection(key: str, raw: str, model: Type[T]) -> list[T]:
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise MalformedLocalData(f"{key} is not valid JSON") from exc
    if not isinstance(payload, list):
        raise MalformedLocalData(f"{key} does not hold a list")
    items = []
    for index, entry in enumerate(payload):
        try:
            items.append(model.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping invalid %s entry %d (%d error(s))", key, index, exc.error_count())
    return items


class LocalRepository:
    """Entity collections and scalar markers kept in the local key/value store.

    Reads fail soft: a missing or unreadable payload comes back as an empty
    collection (or the default scalar), and entries that do not validate are
    dropped one by one. Writes overwrite the prior value and never raise;
    failures are logged.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _get_raw(self, key: str) -> str | None:
        try:
            return self.store.get_item(key)
        except SQLAlchemyError:
            logger.exception("Failed to read local key %s", key)
            return None

    def _set_raw(self, key: str, value: str) -> bool:
        try:
            self.store.set_item(key, value)
        except SQLAlchemyError:
            logger.exception("Failed to write local key %s", key)
            return False
        return True

    def load(self, key: str, model: Type[T]) -> list[T]:
        raw = self._get_raw(key)
        if not raw:
            return []
        try:
            return decode_collection(key, raw, model)
        except MalformedLocalData as exc:
            logger.warning("Ignoring malformed local data: %s", exc)
            return []

    def save(self, key: str, collection: Sequence[EntityModel]) -> bool:
        raw = json.dumps(dump_collection(collection), ensure_ascii=False)
        return self._set_raw(key, raw)

    def get_str(self, key: str, default: str = "") -> str:
        value = self._get_raw(key)
        if value is None:
            return str(default or "")
        return str(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._get_raw(key)
        if value is None:
            return int(default or 0)
        try:
            return int(value)
        except ValueError:
            logger.warning("Ignoring non-integer value for %s", key)
            return int(default or 0)

    def set_value(self, key: str, value) -> bool:
        return self._set_raw(key, "" if value is None else str(value))
