"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides descriptor sets built in memory.
"""

import sys
from pathlib import Path

# Insert local src directory at the beginning of sys.path
# This ensures that the local protobook package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of protobook modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("protobook"):
        del sys.modules[module_name]

import pytest  # noqa: E402
from google.protobuf import descriptor_pb2  # noqa: E402

FieldProto = descriptor_pb2.FieldDescriptorProto


def add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    type_: int,
    type_name: str | None = None,
    *,
    repeated: bool = False,
    oneof_index: int | None = None,
    proto3_optional: bool = False,
    deprecated: bool = False,
) -> FieldProto:
    field = message.field.add(name=name, number=number, type=type_)
    field.label = FieldProto.LABEL_REPEATED if repeated else FieldProto.LABEL_OPTIONAL
    if type_name is not None:
        field.type_name = type_name
    if oneof_index is not None:
        field.oneof_index = oneof_index
    if proto3_optional:
        field.proto3_optional = True
    if deprecated:
        field.options.deprecated = True
    return field


def add_location(
    file: descriptor_pb2.FileDescriptorProto,
    path: list[int],
    span: list[int],
    leading: str | None = None,
    trailing: str | None = None,
    detached: list[str] | None = None,
) -> None:
    location = file.source_code_info.location.add()
    location.path.extend(path)
    location.span.extend(span)
    if leading is not None:
        location.leading_comments = leading
    if trailing is not None:
        location.trailing_comments = trailing
    location.leading_detached_comments.extend(detached or [])


def build_hello_file() -> descriptor_pb2.FileDescriptorProto:
    """hello/v1/hello.proto: messages, nested types, a map, oneofs, enum, service."""
    file = descriptor_pb2.FileDescriptorProto(name="hello/v1/hello.proto", package="hello", syntax="proto3")

    request = file.message_type.add(name="HelloRequest")
    request.oneof_decl.add(name="choice")
    request.oneof_decl.add(name="_maybe")
    add_field(request, "name", 1, FieldProto.TYPE_STRING)
    add_field(request, "greeting", 2, FieldProto.TYPE_ENUM, ".hello.Greeting")
    add_field(request, "people", 3, FieldProto.TYPE_MESSAGE, ".hello.HelloRequest.PeopleEntry", repeated=True)
    add_field(request, "tags", 4, FieldProto.TYPE_STRING, repeated=True)
    add_field(request, "text", 5, FieldProto.TYPE_STRING, oneof_index=0)
    add_field(request, "mood", 6, FieldProto.TYPE_ENUM, ".hello.HelloRequest.Mood", oneof_index=0)
    add_field(request, "maybe", 7, FieldProto.TYPE_INT32, oneof_index=1, proto3_optional=True)
    add_field(request, "legacy", 8, FieldProto.TYPE_BOOL, deprecated=True)

    person = request.nested_type.add(name="Person")
    add_field(person, "name", 1, FieldProto.TYPE_STRING)

    entry = request.nested_type.add(name="PeopleEntry")
    entry.options.map_entry = True
    add_field(entry, "key", 1, FieldProto.TYPE_STRING)
    add_field(entry, "value", 2, FieldProto.TYPE_MESSAGE, ".hello.HelloRequest.Person")

    mood = request.enum_type.add(name="Mood")
    mood.value.add(name="MOOD_UNSPECIFIED", number=0)
    mood.value.add(name="MOOD_HAPPY", number=1)

    reply = file.message_type.add(name="HelloReply")
    add_field(reply, "message", 1, FieldProto.TYPE_STRING)

    greeting = file.enum_type.add(name="Greeting")
    greeting.value.add(name="GREETING_UNSPECIFIED", number=0)
    formal = greeting.value.add(name="GREETING_FORMAL", number=1)
    formal.options.deprecated = True

    service = file.service.add(name="Greeter")
    service.method.add(name="SayHello", input_type=".hello.HelloRequest", output_type=".hello.HelloReply")
    service.method.add(
        name="StreamHello",
        input_type=".hello.HelloRequest",
        output_type=".hello.HelloReply",
        client_streaming=True,
        server_streaming=True,
    )

    add_location(file, [4, 0], [4, 0, 20, 1], leading=" A greeting request.\n")
    add_location(file, [4, 0, 2, 0], [5, 2, 18], trailing=" Who to greet.\n")
    add_location(file, [6, 0], [30, 0, 34, 1], leading=" The greeting service.\n")
    add_location(file, [6, 0, 2, 0], [31, 2, 52])
    add_location(file, [5, 0], [22, 0, 25, 1], detached=[" Greetings.\n"])
    return file


def build_other_file() -> descriptor_pb2.FileDescriptorProto:
    """other/namespace/other.proto: references a message from package hello."""
    file = descriptor_pb2.FileDescriptorProto(
        name="other/namespace/other.proto", package="other.namespace", syntax="proto3"
    )
    wrapper = file.message_type.add(name="Wrapper")
    add_field(wrapper, "reply", 1, FieldProto.TYPE_MESSAGE, ".hello.HelloReply")
    return file


@pytest.fixture
def hello_file() -> descriptor_pb2.FileDescriptorProto:
    return build_hello_file()


@pytest.fixture
def descriptor_set() -> descriptor_pb2.FileDescriptorSet:
    """Two packages, `hello` and `other.namespace`."""
    return descriptor_pb2.FileDescriptorSet(file=[build_hello_file(), build_other_file()])


@pytest.fixture
def descriptor_path(tmp_path: Path, descriptor_set: descriptor_pb2.FileDescriptorSet) -> Path:
    """The descriptor set serialized into a book directory."""
    path = tmp_path / "protos.pb"
    path.write_bytes(descriptor_set.SerializeToString())
    return path
