"""Scalar value types and their generated-language equivalents.

Source: the scalar value types table of the protobuf language guide.
Notes and a few cells contain inline HTML and are rendered unescaped.
"""

from dataclasses import dataclass

from google.protobuf import descriptor_pb2

FieldType = descriptor_pb2.FieldDescriptorProto.Type


@dataclass(frozen=True, slots=True)
class Primitive:
    proto: str
    note: str
    cpp: str
    java_kotlin: str
    python: str
    go: str
    ruby: str
    csharp: str
    php: str
    dart: str
    rust: str


_NEGATIVE_NOTE = (
    "Uses variable-length encoding. Inefficient for encoding negative numbers; "
    "if your field is likely to have negative values, use {alt} instead."
)
_LONG = "int/long<sup>[4]</sup>"
_PHP_LONG = "integer/string<sup>[6]</sup>"
_FIXNUM = "Fixnum or Bignum (as required)"

PRIMITIVES: dict[int, Primitive] = {
    FieldType.TYPE_DOUBLE: Primitive(
        "double", "", "double", "double", "float", "float64", "Float", "double", "float", "double", "f64"
    ),
    FieldType.TYPE_FLOAT: Primitive(
        "float", "", "float", "float", "float", "float32", "Float", "float", "float", "double", "f32"
    ),
    FieldType.TYPE_INT32: Primitive(
        "int32", _NEGATIVE_NOTE.format(alt="sint32"),
        "int32", "int", "int", "int32", _FIXNUM, "int", "integer", "int", "i32",
    ),
    FieldType.TYPE_INT64: Primitive(
        "int64", _NEGATIVE_NOTE.format(alt="sint64"),
        "int64", "long", _LONG, "int64", "Bignum", "long", _PHP_LONG, "Int64", "i64",
    ),
    FieldType.TYPE_UINT32: Primitive(
        "uint32", "Uses variable-length encoding.",
        "uint32", "int", _LONG, "uint32", _FIXNUM, "uint", "integer", "int", "u32",
    ),
    FieldType.TYPE_UINT64: Primitive(
        "uint64", "Uses variable-length encoding.",
        "uint64", "long", _LONG, "uint64", "Bignum", "ulong", _PHP_LONG, "Int64", "u64",
    ),
    FieldType.TYPE_SINT32: Primitive(
        "sint32",
        "Uses variable-length encoding. Signed int value. "
        "These more efficiently encode negative numbers than regular int32s.",
        "int32", "int", "int", "int32", _FIXNUM, "int", "integer", "int", "i32",
    ),
    FieldType.TYPE_SINT64: Primitive(
        "sint64",
        "Uses variable-length encoding. Signed int value. "
        "These more efficiently encode negative numbers than regular int64s.",
        "int64", "long", _LONG, "int64", "Bignum", "long", _PHP_LONG, "Int64", "i64",
    ),
    FieldType.TYPE_FIXED32: Primitive(
        "fixed32", "Always four bytes. More efficient than uint32 if values are often greater than 2<sup>28</sup>.",
        "uint32", "int", _LONG, "uint32", _FIXNUM, "uint", "integer", "int", "u32",
    ),
    FieldType.TYPE_FIXED64: Primitive(
        "fixed64", "Always eight bytes. More efficient than uint64 if values are often greater than 2<sup>56</sup>.",
        "uint64", "long", _LONG, "uint64", "Bignum", "ulong", _PHP_LONG, "Int64", "u64",
    ),
    FieldType.TYPE_SFIXED32: Primitive(
        "sfixed32", "Always four bytes.",
        "int32", "int", "int", "int32", _FIXNUM, "int", "integer", "int", "i32",
    ),
    FieldType.TYPE_SFIXED64: Primitive(
        "sfixed64", "Always eight bytes.",
        "int64", "long", _LONG, "int64", "Bignum", "long", _PHP_LONG, "Int64", "i64",
    ),
    FieldType.TYPE_BOOL: Primitive(
        "bool", "", "bool", "boolean", "bool", "bool", "TrueClass/FalseClass", "bool", "boolean", "bool", "bool"
    ),
    FieldType.TYPE_STRING: Primitive(
        "string",
        "A string must always contain UTF-8 encoded or 7-bit ASCII text, and cannot be longer than 2<sup>32</sup>.",
        "string", "String", "str/unicode<sup>[5]</sup>", "string", "String (UTF-8)", "string", "string", "String",
        "ProtoString",
    ),
    FieldType.TYPE_BYTES: Primitive(
        "bytes", "May contain any arbitrary sequence of bytes no longer than 2<sup>32</sup>.",
        "string", "ByteString", "str (Python 2)<br/>bytes (Python 3)", "[]byte", "String (ASCII-8BIT)", "ByteString",
        "string", "List&lt;int&gt;", "ProtoBytes",
    ),
}


def is_scalar(type_: int) -> bool:
    return type_ in PRIMITIVES


def primitive(type_: int) -> Primitive:
    """Definition of a scalar field type.

    Raises:
        KeyError: `type_` is a message, enum or group type.
    """
    return PRIMITIVES[type_]
