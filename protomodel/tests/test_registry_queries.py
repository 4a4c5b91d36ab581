"""Query facade tests: ordering, filters, groups and oneofs."""

import unittest
from types import MappingProxyType

from protomodel.ingest import build_registry
from protomodel.slices import FieldSlice, MessageSlice
from protomodel.tests.fixtures.build_requests import build_request


class TestOrderingAndFilters(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.registry = build_registry(build_request())

    def test_message_fields_in_declaration_order(self) -> None:
        message = self.registry.message(".testv2.Message")
        self.assertEqual(
            message.fields().names()[:3],
            ("string_field", "repeated_string_field", "enum_field"),
        )

    def test_top_level_messages_to_generate(self) -> None:
        messages = self.registry.messages().to_generate().not_nested()
        self.assertIsInstance(messages, MessageSlice)
        self.assertEqual(
            messages.ids(),
            (
                ".testv2.Message",
                ".testv2.OtherMessage",
                ".testv2.HiddenMessage",
                ".testv3.Message",
            ),
        )

    def test_to_generate_excludes_dependency_files(self) -> None:
        self.assertNotIn(".shared.Shared", self.registry.messages().to_generate().ids())
        self.assertNotIn(".shared.Level", self.registry.enums().to_generate().ids())
        self.assertEqual(
            self.registry.files().to_generate().names(),
            ("testdata/testv2.proto", "testdata/testv3.proto"),
        )

    def test_to_generate_applies_to_members(self) -> None:
        fields = self.registry.fields().to_generate()
        self.assertNotIn(".shared.Shared:id", fields.ids())
        self.assertIn(".testv3.Message:labels", fields.ids())
        values = self.registry.enum_values().to_generate()
        self.assertNotIn(".shared.Level:LEVEL_LOW", values.ids())
        methods = self.registry.methods().to_generate()
        self.assertIn(".testv3.Service:Get", methods.ids())

    def test_not_nested_enums(self) -> None:
        self.assertEqual(
            self.registry.enums().to_generate().not_nested().ids(),
            (".testv2.Enum", ".testv2.OtherEnum", ".testv3.Status"),
        )

    def test_filters_compose_in_any_order(self) -> None:
        a = self.registry.messages().visible().to_generate().not_nested()
        b = self.registry.messages().not_nested().to_generate().visible()
        self.assertEqual(a.ids(), b.ids())

    def test_where_keeps_slice_type(self) -> None:
        fields = self.registry.fields().where(lambda f: f.is_repeated())
        self.assertIsInstance(fields, FieldSlice)
        self.assertEqual(
            fields.ids(),
            (".testv2.Message:repeated_string_field", ".testv3.Message:labels"),
        )

    def test_service_methods_in_order(self) -> None:
        service = self.registry.service(".testv2.Service")
        self.assertEqual(service.methods().names(), ("Method", "StreamMethod", "HiddenMethod"))

    def test_enum_values_in_order(self) -> None:
        enum = self.registry.enum(".testv3.Status")
        self.assertEqual(enum.values().names(), ("STATUS_UNKNOWN", "STATUS_OK"))
        self.assertEqual([v.number for v in enum.values()], [0, 1])

    def test_parents_numbered_before_children(self) -> None:
        self.assertEqual([f.idx for f in self.registry.files()], [0, 1, 2])
        for message in self.registry.messages():
            for nested in message.messages():
                self.assertLess(message.idx, nested.idx)
        for index, file in enumerate(self.registry.files()):
            for message in file.messages():
                self.assertIs(message.file(), file)
                self.assertEqual(message.file().idx, index)

    def test_nested_children(self) -> None:
        message = self.registry.message(".testv2.Message")
        self.assertEqual(
            message.messages().names(),
            ("EmbeddedMessage", "OtherEmbeddedMessage", "GroupField"),
        )
        self.assertEqual(message.enums().names(), ("EmbeddedEnum", "OtherEmbeddedEnum"))

    def test_lookup_miss_returns_none(self) -> None:
        self.assertIsNone(self.registry.message(".testv2.Missing"))
        self.assertIsNone(self.registry.field(".testv2.Message:missing"))

    def test_slices_are_immutable_copies(self) -> None:
        messages = self.registry.messages()
        with self.assertRaises(TypeError):
            messages[0] = None  # type: ignore[index]
        self.assertEqual(len(self.registry.messages()), 8)

    def test_sealed_maps_are_read_only(self) -> None:
        self.assertTrue(self.registry.sealed)
        self.assertIsInstance(self.registry._entities["message"], MappingProxyType)

    def test_packages_to_generate_deduplicated(self) -> None:
        request = build_request()
        request.proto_file[2].package = "testv2"
        request.proto_file[2].message_type[0].name = "Message3"
        request.proto_file[2].enum_type[0].name = "Status"
        request.proto_file[2].message_type[0].field[1].type_name = ".testv2.Status"
        request.proto_file[2].service[0].name = "Service3"
        request.proto_file[2].service[0].method[0].input_type = ".testv2.Message3"
        registry = build_registry(request)
        self.assertEqual(registry.packages_to_generate(), ("testv2",))


class TestGroupsAndFieldTypes(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.registry = build_registry(build_request())

    def test_group_fields_never_returned(self) -> None:
        group_id = ".testv2.Message:groupfield"
        self.assertNotIn(group_id, self.registry.fields().ids())
        self.assertNotIn(group_id, self.registry.fields().to_generate().visible().ids())
        self.assertNotIn(group_id, self.registry.message(".testv2.Message").fields().ids())

    def test_group_field_reachable_by_identifier(self) -> None:
        group = self.registry.field(".testv2.Message:groupfield")
        self.assertTrue(group.is_type_group())
        self.assertIsNone(group.type_message())

    def test_is_type(self) -> None:
        field = self.registry.field(".testv2.Message.EmbeddedMessage:uint32_field")
        self.assertTrue(field.is_type("uint32"))
        self.assertFalse(field.is_type("string"))
        with self.assertRaises(ValueError):
            field.is_type("varchar")

    def test_type_name_string(self) -> None:
        lookup = self.registry.field
        self.assertEqual(lookup(".testv2.Message:string_field").type_name_string(), "string")
        self.assertEqual(
            lookup(".testv2.Message:repeated_string_field").type_name_string(), "[]string"
        )
        self.assertEqual(lookup(".testv2.Message:enum_field").type_name_string(), "testv2.Enum")
        self.assertEqual(
            lookup(".testv2.Message:other_message_field").type_name_string(),
            "testv2.OtherMessage",
        )

    def test_labels(self) -> None:
        repeated = self.registry.field(".testv3.Message:labels")
        self.assertTrue(repeated.is_repeated())
        self.assertFalse(repeated.is_required())


class TestOneofs(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.registry = build_registry(build_request())

    def test_oneof_owns_member_fields(self) -> None:
        oneof = self.registry.oneof(".testv2.Message:oneof_field")
        self.assertEqual(oneof.fields().names(), ("bool_field", "embedded_enum_field"))
        self.assertEqual(oneof.parent().id, ".testv2.Message")

    def test_member_fields_point_back(self) -> None:
        oneof = self.registry.oneof(".testv2.Message:oneof_field")
        for field in oneof.fields():
            self.assertTrue(field.is_oneof())
            self.assertIs(field.oneof(), oneof)

    def test_every_oneof_field_belongs_to_exactly_one_oneof(self) -> None:
        members = {}
        for oneof in self.registry.oneofs():
            for field_id in oneof.field_ids:
                self.assertNotIn(field_id, members)
                members[field_id] = oneof.id
        for field in self.registry.fields():
            if field.is_oneof():
                self.assertEqual(members[field.id], field.oneof_id)
            else:
                self.assertNotIn(field.id, members)

    def test_non_member_field(self) -> None:
        field = self.registry.field(".testv2.Message:string_field")
        self.assertFalse(field.is_oneof())
        self.assertIsNone(field.oneof())

    def test_message_oneofs(self) -> None:
        message = self.registry.message(".testv2.Message")
        self.assertEqual(message.oneofs().ids(), (".testv2.Message:oneof_field",))


if __name__ == "__main__":
    unittest.main()
