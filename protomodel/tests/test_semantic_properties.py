"""Visibility and deprecation propagation tests."""

import unittest

from google.protobuf import descriptor_pb2

from protomodel.config import ModelSettings
from protomodel.ingest import build_registry
from protomodel.meta import Visibility
from protomodel.tests.fixtures.build_requests import (
    FieldProto,
    add_field,
    build_request,
    build_single_file_request,
    set_meta,
)


class TestVisibility(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.registry = build_registry(build_request())

    def test_private_message_hidden(self) -> None:
        self.assertFalse(self.registry.message(".testv2.HiddenMessage").is_visible())
        self.assertTrue(self.registry.message(".testv2.Message").is_visible())

    def test_field_hidden_by_own_metadata(self) -> None:
        field = self.registry.field(".testv2.Message:embedded_message_field")
        self.assertFalse(field.is_visible())
        self.assertTrue(field.type_message().is_visible())

    def test_field_hidden_by_private_type(self) -> None:
        self.assertFalse(self.registry.field(".testv2.Message:hidden_field").is_visible())

    def test_fields_of_private_message_hidden(self) -> None:
        self.assertFalse(self.registry.field(".testv2.HiddenMessage:name").is_visible())

    def test_visible_field_filter(self) -> None:
        message = self.registry.message(".testv2.Message")
        self.assertEqual(
            message.fields().visible().names(),
            (
                "string_field",
                "repeated_string_field",
                "enum_field",
                "other_message_field",
                "bool_field",
                "embedded_enum_field",
            ),
        )

    def test_method_hidden_by_private_input(self) -> None:
        service = self.registry.service(".testv2.Service")
        self.assertEqual(service.methods().visible().names(), ("Method", "StreamMethod"))

    def test_private_enum_value(self) -> None:
        enum = self.registry.enum(".testv2.Enum")
        self.assertEqual(enum.values().visible().names(), ("ENUM_A",))

    def test_private_file_hides_everything_in_it(self) -> None:
        file_proto = descriptor_pb2.FileDescriptorProto(name="hidden.proto", package="hidden")
        set_meta(file_proto.options, "file", visibility=Visibility.PRIVATE)
        message = file_proto.message_type.add(name="Thing")
        add_field(message, "name", 1, FieldProto.TYPE_STRING)
        message.nested_type.add(name="Inner")
        enum = file_proto.enum_type.add(name="Kind")
        enum.value.add(name="KIND_A", number=0)
        service = file_proto.service.add(name="Api")
        service.method.add(name="Get", input_type=".hidden.Thing", output_type=".hidden.Thing")

        registry = build_registry(build_single_file_request(file_proto))
        self.assertEqual(registry.files().visible(), ())
        self.assertEqual(registry.messages().visible(), ())
        self.assertEqual(registry.fields().visible(), ())
        self.assertEqual(registry.enums().visible(), ())
        self.assertEqual(registry.enum_values().visible(), ())
        self.assertEqual(registry.services().visible(), ())
        self.assertEqual(registry.methods().visible(), ())

    def test_private_parent_hides_nested_declarations(self) -> None:
        file_proto = descriptor_pb2.FileDescriptorProto(name="outer.proto", package="outer")
        outer = file_proto.message_type.add(name="Outer")
        set_meta(outer.options, "message", visibility=Visibility.PRIVATE)
        inner = outer.nested_type.add(name="Inner")
        add_field(inner, "value", 1, FieldProto.TYPE_INT64)
        outer.enum_type.add(name="Mode").value.add(name="MODE_A", number=0)
        oneof_holder = file_proto.message_type.add(name="Holder")
        oneof_holder.oneof_decl.add(name="choice")
        add_field(oneof_holder, "a", 1, FieldProto.TYPE_STRING, oneof_index=0)
        set_meta(oneof_holder.oneof_decl[0].options, "oneof", visibility=Visibility.PRIVATE)

        registry = build_registry(build_single_file_request(file_proto))
        self.assertFalse(registry.message(".outer.Outer.Inner").is_visible())
        self.assertFalse(registry.field(".outer.Outer.Inner:value").is_visible())
        self.assertFalse(registry.enum(".outer.Outer.Mode").is_visible())
        self.assertFalse(registry.oneof(".outer.Holder:choice").is_visible())
        self.assertTrue(registry.field(".outer.Holder:a").is_visible())


class TestDeprecation(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.registry = build_registry(build_request())

    def test_own_flag(self) -> None:
        self.assertTrue(self.registry.message(".testv2.OtherMessage").is_deprecated())
        self.assertTrue(self.registry.field(".testv2.Message:repeated_string_field").is_deprecated())
        self.assertFalse(self.registry.message(".testv2.Message").is_deprecated())

    def test_field_inherits_from_type(self) -> None:
        self.assertTrue(self.registry.field(".testv2.Message:other_message_field").is_deprecated())
        self.assertFalse(self.registry.field(".testv2.Message:enum_field").is_deprecated())

    def test_field_inherits_from_parent(self) -> None:
        self.assertTrue(self.registry.field(".testv2.OtherMessage:shared_field").is_deprecated())

    def test_not_deprecated_filter(self) -> None:
        message = self.registry.message(".testv2.Message")
        self.assertEqual(
            message.fields().not_deprecated().names(),
            (
                "string_field",
                "enum_field",
                "bool_field",
                "embedded_enum_field",
                "embedded_message_field",
                "hidden_field",
            ),
        )

    def test_method_inherits_from_types_and_service(self) -> None:
        self.assertTrue(self.registry.method(".testv2.Service:Method").is_deprecated())
        self.assertFalse(self.registry.method(".testv2.Service:StreamMethod").is_deprecated())
        self.assertTrue(self.registry.method(".testv2.OtherService:Ping").is_deprecated())

    def test_enum_values_inherit_from_enum(self) -> None:
        self.assertTrue(self.registry.enum(".testv2.OtherEnum").is_deprecated())
        self.assertTrue(self.registry.enum_value(".testv2.OtherEnum:OTHER_A").is_deprecated())
        self.assertFalse(self.registry.enum_value(".testv2.Enum:ENUM_A").is_deprecated())

    def test_deprecated_file_propagates(self) -> None:
        file_proto = descriptor_pb2.FileDescriptorProto(name="old.proto", package="old")
        file_proto.options.deprecated = True
        message = file_proto.message_type.add(name="Legacy")
        add_field(message, "name", 1, FieldProto.TYPE_STRING)
        message.oneof_decl.add(name="choice")
        add_field(message, "a", 2, FieldProto.TYPE_STRING, oneof_index=0)
        file_proto.enum_type.add(name="Kind").value.add(name="KIND_A", number=0)
        service = file_proto.service.add(name="Api")
        service.method.add(name="Get", input_type=".old.Legacy", output_type=".old.Legacy")

        registry = build_registry(build_single_file_request(file_proto))
        self.assertEqual(registry.messages().not_deprecated(), ())
        self.assertEqual(registry.fields().not_deprecated(), ())
        self.assertEqual(registry.oneofs().not_deprecated(), ())
        self.assertEqual(registry.enums().not_deprecated(), ())
        self.assertEqual(registry.enum_values().not_deprecated(), ())
        self.assertEqual(registry.methods().not_deprecated(), ())


class TestEnumDeprecationModes(unittest.TestCase):
    """The default check follows deprecation; the legacy one follows visibility."""

    def _request(self):
        file_proto = descriptor_pb2.FileDescriptorProto(name="private.proto", package="priv")
        set_meta(file_proto.options, "file", visibility=Visibility.PRIVATE)
        file_proto.enum_type.add(name="Plain").value.add(name="PLAIN_A", number=0)
        flagged = file_proto.enum_type.add(name="Flagged")
        flagged.options.deprecated = True
        flagged.value.add(name="FLAGGED_A", number=0)
        return build_single_file_request(file_proto)

    def test_default_mode(self) -> None:
        registry = build_registry(build_request())
        self.assertFalse(registry.enum(".testv2.Enum").is_deprecated())
        self.assertFalse(registry.enum(".testv2.Message.EmbeddedEnum").is_deprecated())
        self.assertTrue(registry.enum(".testv2.OtherEnum").is_deprecated())

    def test_legacy_mode_visible_file_marks_deprecated(self) -> None:
        settings = ModelSettings(legacy_enum_deprecation=True)
        registry = build_registry(build_request(), settings=settings)
        self.assertTrue(registry.enum(".testv2.Enum").is_deprecated())
        self.assertTrue(registry.enum(".testv2.Message.EmbeddedEnum").is_deprecated())
        self.assertTrue(registry.field(".testv2.Message:enum_field").is_deprecated())

    def test_legacy_mode_private_file(self) -> None:
        settings = ModelSettings(legacy_enum_deprecation=True)
        registry = build_registry(self._request(), settings=settings)
        self.assertFalse(registry.enum(".priv.Plain").is_deprecated())
        self.assertTrue(registry.enum(".priv.Flagged").is_deprecated())

    def test_default_mode_private_file(self) -> None:
        registry = build_registry(self._request())
        self.assertFalse(registry.enum(".priv.Plain").is_deprecated())
        self.assertTrue(registry.enum(".priv.Flagged").is_deprecated())


if __name__ == "__main__":
    unittest.main()
