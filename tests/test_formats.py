"""Tests for the Avro and Protobuf format adapters."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from google.protobuf import wrappers_pb2

from schemaregistry.errors import SchemaParseError, SerializationError, TypeMismatchError
from schemaregistry.formats import AvroAdapter, ProtobufAdapter, build_adapter
from schemaregistry.models import SchemaType
from tests.support import AVRO_V1, AVRO_V2, PROTO_SCHEMA, SampleV1, SampleV2


@dataclass
class SampleDataclass:
    field1: int
    field2: float
    field3: str


class TestBuildAdapter:
    def test_missing_type_defaults_to_avro(self):
        assert isinstance(build_adapter(None, AVRO_V1), AvroAdapter)

    @pytest.mark.parametrize("tag", [SchemaType.AVRO, "AVRO", "avro"])
    def test_avro_tag(self, tag):
        assert isinstance(build_adapter(tag, AVRO_V1), AvroAdapter)

    @pytest.mark.parametrize("tag", [SchemaType.PROTOBUF, "PROTOBUF"])
    def test_protobuf_tag(self, tag):
        assert isinstance(build_adapter(tag, PROTO_SCHEMA), ProtobufAdapter)

    def test_json_schema_not_supported(self):
        with pytest.raises(SchemaParseError, match="not supported"):
            build_adapter(SchemaType.JSON, "{}")

    def test_unknown_tag(self):
        with pytest.raises(SchemaParseError, match="unknown schema type"):
            build_adapter("THRIFT", "{}")


class TestAvroAdapter:
    def test_round_trip_pydantic_model(self):
        adapter = build_adapter(None, AVRO_V1, label="test_subject#1")
        value = SampleV1(field1=1, field2=2.5, field3="x")

        out = adapter.new_unmarshaler(adapter.serialize(value)).unmarshal(SampleV1)

        assert out == value

    def test_round_trip_mapping_returns_record_without_target(self):
        adapter = build_adapter(None, AVRO_V1)
        record = {"field1": 1, "field2": 2.0, "field3": "x"}

        assert adapter.new_unmarshaler(adapter.serialize(record)).unmarshal() == record

    def test_round_trip_dataclass(self):
        adapter = build_adapter(None, AVRO_V1)
        value = SampleDataclass(field1=3, field2=0.5, field3="dc")

        out = adapter.new_unmarshaler(adapter.serialize(value)).unmarshal(SampleDataclass)

        assert out == value

    def test_newer_writer_read_into_older_model(self):
        adapter = build_adapter(None, AVRO_V2)
        payload = adapter.serialize(SampleV2(field1=1, field2=1.0, field3="a", field4="b"))

        out = adapter.new_unmarshaler(payload).unmarshal(SampleV1)

        assert out == SampleV1(field1=1, field2=1.0, field3="a")

    @pytest.mark.parametrize(
        "schema",
        [
            "not json",
            '{"type": "record", "name": "X"}',
            '{"type": "array", "items": {"type": "record", "name": "Y"}}',
            '{"type": "record", "name": "Z", "fields": [{"name": "f", "type": {"type": "record", "name": "W"}}]}',
            '{"type": "nope"}',
        ],
    )
    def test_invalid_schema(self, schema):
        with pytest.raises(SchemaParseError):
            build_adapter(None, schema)

    def test_value_not_matching_schema(self):
        adapter = build_adapter(None, AVRO_V1, label="test_subject#1")

        with pytest.raises(SerializationError, match="test_subject#1"):
            adapter.serialize({"field1": "not an int", "field2": 1.0, "field3": "x"})

    def test_truncated_payload(self):
        adapter = build_adapter(None, AVRO_V1)
        payload = adapter.serialize({"field1": 1, "field2": 2.0, "field3": "long enough"})

        with pytest.raises(SerializationError):
            adapter.new_unmarshaler(payload[:3]).unmarshal()

    def test_target_rejecting_record(self):
        adapter = build_adapter(None, AVRO_V1)
        payload = adapter.serialize({"field1": 1, "field2": 2.0, "field3": "x"})

        with pytest.raises(SerializationError):
            adapter.new_unmarshaler(payload).unmarshal(wrappers_pb2.StringValue)


class TestProtobufAdapter:
    def test_round_trip_into_class(self):
        adapter = build_adapter(SchemaType.PROTOBUF, PROTO_SCHEMA)
        message = wrappers_pb2.StringValue(value="hello")

        out = adapter.new_unmarshaler(adapter.serialize(message)).unmarshal(wrappers_pb2.StringValue)

        assert out == message

    def test_round_trip_into_instance(self):
        adapter = build_adapter(SchemaType.PROTOBUF, PROTO_SCHEMA)
        target = wrappers_pb2.Int64Value()

        out = adapter.new_unmarshaler(adapter.serialize(wrappers_pb2.Int64Value(value=42))).unmarshal(target)

        assert out is target
        assert target.value == 42

    def test_payload_is_any_wrapper(self):
        from google.protobuf import any_pb2

        adapter = build_adapter(SchemaType.PROTOBUF, PROTO_SCHEMA)
        wrapper = any_pb2.Any()
        wrapper.ParseFromString(adapter.serialize(wrappers_pb2.StringValue(value="x")))

        assert wrapper.type_url.endswith("google.protobuf.StringValue")

    @pytest.mark.parametrize("value", [{"value": "x"}, "x", None])
    def test_serialize_requires_message(self, value):
        adapter = build_adapter(SchemaType.PROTOBUF, PROTO_SCHEMA)

        with pytest.raises(TypeMismatchError):
            adapter.serialize(value)

    @pytest.mark.parametrize("target", [None, dict, SampleV1])
    def test_unmarshal_requires_message_target(self, target):
        adapter = build_adapter(SchemaType.PROTOBUF, PROTO_SCHEMA)
        payload = adapter.serialize(wrappers_pb2.StringValue(value="x"))

        with pytest.raises(TypeMismatchError):
            adapter.new_unmarshaler(payload).unmarshal(target)

    def test_unmarshal_into_other_message_type(self):
        adapter = build_adapter(SchemaType.PROTOBUF, PROTO_SCHEMA)
        payload = adapter.serialize(wrappers_pb2.StringValue(value="x"))

        with pytest.raises(SerializationError, match="google.protobuf.Int64Value"):
            adapter.new_unmarshaler(payload).unmarshal(wrappers_pb2.Int64Value)

    def test_garbage_payload(self):
        adapter = build_adapter(SchemaType.PROTOBUF, PROTO_SCHEMA)

        with pytest.raises(SerializationError):
            adapter.new_unmarshaler(b"\xff\xff\xff").unmarshal(wrappers_pb2.StringValue)
