"""
World serializers.

- TextWorldSerializer reads the human-edited YAML scene files.
- BinaryWorldSerializer produces the compact byte stream that gets embedded
  into the scene assembly. Output is deterministic (sorted keys) so the same
  scene always yields the same generated source.
"""

import datetime
import logging
import math
from typing import Any, Protocol

import orjson
import yaml
from pydantic import ValidationError

from grapplebuild.scenes.models import World

logger = logging.getLogger(__name__)

# Integer range orjson can encode.
_INT_MIN = -(2**63)
_INT_MAX = 2**64 - 1


class SerializationError(Exception):
    """Raised when a world cannot be read or written."""

    pass


class WorldSerializer(Protocol):
    """Round-trip contract for world serializers."""

    def serialize(self, world: World) -> bytes: ...

    def deserialize(self, data: bytes) -> World: ...


def check_json_safe(value: Any, where: str = "scene") -> None:
    """Reject values the binary payload cannot carry unchanged.

    Raises:
        SerializationError: On non-finite floats, dates, out-of-range
            integers, non-string mapping keys or other non-JSON values
    """
    if value is None or isinstance(value, (bool, str)):
        return
    if isinstance(value, int):
        if not _INT_MIN <= value <= _INT_MAX:
            raise SerializationError(f"{where}: integer {value} exceeds 64-bit range")
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise SerializationError(f"{where}: non-finite number {value} is not supported")
        return
    if isinstance(value, (datetime.date, datetime.datetime)):
        raise SerializationError(
            f"{where}: timestamp {value.isoformat()} is not supported; quote it to keep it as text"
        )
    if isinstance(value, list):
        for i, item in enumerate(value):
            check_json_safe(item, f"{where}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(f"{where}: mapping key {key!r} must be a string")
            check_json_safe(item, f"{where}.{key}")
        return
    raise SerializationError(f"{where}: unsupported value of type {type(value).__name__}")


class TextWorldSerializer:
    """YAML scene files <-> World."""

    def deserialize(self, data: bytes | str) -> World:
        text = data.decode("utf-8-sig") if isinstance(data, bytes) else data
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SerializationError(f"Invalid YAML in scene: {e}")

        if raw is None:
            return World()
        if isinstance(raw, list):
            raw = {"entities": raw}
        if not isinstance(raw, dict):
            raise SerializationError(
                f"Scene must be a mapping or a list of entities, got {type(raw).__name__}"
            )
        check_json_safe(raw)

        try:
            return World(**raw)
        except ValidationError as e:
            raise SerializationError(f"Scene validation failed:\n{e}")

    def serialize(self, world: World) -> bytes:
        data = world.model_dump(mode="json", exclude_defaults=True)
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False).encode("utf-8")


class BinaryWorldSerializer:
    """World <-> compact bytes."""

    def serialize(self, world: World) -> bytes:
        data = world.model_dump()
        check_json_safe(data, "world")
        try:
            return orjson.dumps(data, option=orjson.OPT_SORT_KEYS)
        except orjson.JSONEncodeError as e:
            raise SerializationError(f"Cannot encode world: {e}")

    def deserialize(self, data: bytes) -> World:
        try:
            raw = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise SerializationError(f"Corrupt world payload: {e}")
        try:
            return World.model_validate(raw)
        except ValidationError as e:
            raise SerializationError(f"World payload validation failed:\n{e}")
