"""Code constants shared by the kernel and its callers.

These enums keep node kinds, coercion tags and issue codes from becoming
stringly-typed across the transport layer.
"""

from enum import Enum


class Kind(str, Enum):
    """Structural kind carried by every schema node."""

    # Primitives
    STRING = "String"
    NUMBER = "Number"
    INTEGER = "Integer"
    BOOLEAN = "Boolean"
    NULL = "Null"
    ANY = "Any"
    NEVER = "Never"
    FILE = "File"

    # Structures
    OBJECT = "Object"
    ARRAY = "Array"
    FILES = "Files"

    # Compositions
    ANY_OF = "Union"
    ONE_OF = "OneOf"
    ALL_OF = "Intersect"

    # Wrappers
    OPTIONAL = "Optional"
    NULLABLE = "Nullable"
    CODEC = "Codec"

    # Indirection / opaque
    REF = "Ref"
    FOREIGN = "Foreign"

    @classmethod
    def parse(cls, value: "Kind | str") -> "Kind":
        """Accept a Kind, its value ("Object") or a lowercase name ("object")."""
        if isinstance(value, cls):
            return value
        text = str(value)
        for member in cls:
            if text == member.value or text.lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown schema kind: {value!r}")


PRIMITIVE_KINDS = frozenset({
    Kind.STRING,
    Kind.NUMBER,
    Kind.INTEGER,
    Kind.BOOLEAN,
    Kind.NULL,
    Kind.ANY,
    Kind.NEVER,
    Kind.FILE,
})

COMPOSITION_KINDS = frozenset({Kind.ANY_OF, Kind.ONE_OF, Kind.ALL_OF})

WRAPPER_KINDS = frozenset({Kind.OPTIONAL, Kind.NULLABLE, Kind.CODEC})


class CoercionTag(str, Enum):
    """Marks a node produced by a coercion pass.

    Consumers use the tag to decide how a raw transport value is decoded.
    """

    OBJECT_STRING = "ObjectString"  # string-encoded object
    ARRAY_STRING = "ArrayString"  # string-encoded array
    ARRAY_QUERY = "ArrayQuery"  # query-encoded array (comma list or repeated keys)
    BOOLEAN_STRING = "BooleanString"
    NUMERIC = "Numeric"  # numeric string


class IssueCode(str, Enum):
    """Validation issue codes produced by compiled validators."""

    INVALID_TYPE = "INVALID_TYPE"
    MISSING_PROPERTY = "MISSING_PROPERTY"
    UNEXPECTED_PROPERTY = "UNEXPECTED_PROPERTY"
    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"
    TOO_SMALL = "TOO_SMALL"
    TOO_BIG = "TOO_BIG"
    NOT_MULTIPLE = "NOT_MULTIPLE"
    PATTERN_MISMATCH = "PATTERN_MISMATCH"
    INVALID_FORMAT = "INVALID_FORMAT"
    NOT_IN_ENUM = "NOT_IN_ENUM"
    TOO_FEW_ITEMS = "TOO_FEW_ITEMS"
    TOO_MANY_ITEMS = "TOO_MANY_ITEMS"
    DUPLICATE_ITEMS = "DUPLICATE_ITEMS"
    NO_UNION_MATCH = "NO_UNION_MATCH"
    AMBIGUOUS_ONE_OF = "AMBIGUOUS_ONE_OF"
    UNRESOLVED_REF = "UNRESOLVED_REF"
    NEVER = "NEVER"
    DECODE_FAILED = "DECODE_FAILED"
    FOREIGN_ISSUE = "FOREIGN_ISSUE"
