"""Schemas, record models and helpers shared by the tests."""

from __future__ import annotations

import json
import time
from typing import Callable

from pydantic import BaseModel

from schemaregistry.formats import Unmarshaler

AVRO_V1 = json.dumps(
    {
        "type": "record",
        "name": "SampleRecord",
        "namespace": "com.mycorp.mynamespace",
        "fields": [
            {"name": "field1", "type": "int"},
            {"name": "field2", "type": "double"},
            {"name": "field3", "type": "string"},
        ],
    }
)

AVRO_V2 = json.dumps(
    {
        "type": "record",
        "name": "SampleRecord",
        "namespace": "com.mycorp.mynamespace",
        "fields": [
            {"name": "field1", "type": "int"},
            {"name": "field2", "type": "double"},
            {"name": "field3", "type": "string"},
            {"name": "field4", "type": "string", "default": ""},
        ],
    }
)

PROTO_SCHEMA = 'syntax = "proto3";\nmessage StringValue { string value = 1; }\n'

SUBJECT = "test_subject"


class SampleV1(BaseModel):
    field1: int
    field2: float
    field3: str


class SampleV2(SampleV1):
    field4: str = ""


def decode_v1(unmarshaler: Unmarshaler) -> SampleV1:
    return unmarshaler.unmarshal(SampleV1)


def decode_v2(unmarshaler: Unmarshaler) -> SampleV2:
    return unmarshaler.unmarshal(SampleV2)


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
