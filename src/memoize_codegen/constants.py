"""
Constants for the wrapper generator.

Defines naming defaults, marker attribute names and error message templates
used throughout the generation pipeline to eliminate magic strings.
"""

# Naming defaults
DEFAULT_CLASS_SUFFIX = "Memoized"  # Appended to the subject class name
DEFAULT_MODULE_SUFFIX = "_memoized"  # Appended to the subject module name
DEFAULT_CACHE_FIELD_PREFIX = "_cache_"  # Prefix of every cache field identifier
DEFAULT_IDENTIFIER_LENGTH = 16  # Hex chars of the signature fingerprint
MIN_IDENTIFIER_LENGTH = 8
MAX_IDENTIFIER_LENGTH = 64  # Full SHA256 hex digest

# Generated code layout
DELEGATE_FIELD = "__delegate"  # Name-mangled, so private to the wrapper
RUNTIME_MODULE = "memoize_codegen.runtime"
RUNTIME_ALIAS = "_memo_runtime"
LOOKUP_KEY_PREFIX = "_key_"
GENERATED_BY = "memoize_codegen"

# Marker attributes set on decorated functions
MARKER_ATTRIBUTE = "__memoize__"
RAISES_ATTRIBUTE = "__raises__"

# Special methods that never appear on the wrapper surface
EXCLUDED_SPECIAL_METHODS = frozenset(
    {
        "__init__",
        "__new__",
        "__del__",
        "__init_subclass__",
        "__class_getitem__",
        "__subclasshook__",
        "__set_name__",
        "__post_init__",
        "__getattr__",
        "__getattribute__",
        "__setattr__",
        "__delattr__",
        "__dir__",
        "__getstate__",
        "__setstate__",
        "__reduce__",
        "__reduce_ex__",
        "__copy__",
        "__deepcopy__",
    }
)

# Return annotations that carry no usable value
VOID_ANNOTATIONS = frozenset(
    {
        "None",
        "NoReturn",
        "Never",
        "typing.NoReturn",
        "typing.Never",
        "typing_extensions.Never",
        "typing_extensions.NoReturn",
    }
)

# Error message templates
ERROR_CLASS_ABSTRACT = "Cannot memoize {subject}: abstract classes cannot be instantiated as a delegate"
ERROR_CLASS_NESTED = "Cannot memoize {subject}: classes nested in another class body are not supported"
ERROR_CLASS_PRIVATE = "Cannot memoize {subject}: class has restricted visibility"
ERROR_CLASS_NOT_A_CLASS = "Cannot memoize {subject}: expected a class, got {type_name}"
ERROR_CONSTRUCTOR_NOT_CALLABLE = "Cannot memoize {subject}: {member} is not callable, the delegate cannot be built"
ERROR_UNKNOWN_MEMBER = "Cannot memoize {subject}.{member}: no such method"
ERROR_MARKER_PRIVATE = "@memoize cannot apply to private method {subject}.{member}"
ERROR_MARKER_STATIC = "@memoize cannot apply to static or class method {subject}.{member}"
ERROR_MARKER_SPECIAL = "@memoize cannot apply to special method {subject}.{member}"
ERROR_MARKER_VOID = "@memoize cannot apply to {subject}.{member}: method returns no usable value"
ERROR_MARKER_GENERATOR = "@memoize cannot apply to generator method {subject}.{member}"
ERROR_DUPLICATE_CACHE_ID = "Cache identifier {cache_id} of {subject}.{member} collides with {other}"
ERROR_RESERVED_NAME = "Cannot memoize {subject}.{member}: parameter {name} shadows a name the wrapper relies on"
ERROR_NOT_IMPORTABLE = "Cannot emit importable module for {subject}: {name} is not importable"
ERROR_NAME_CLASH = "Cannot emit module for {subject}: name {name} refers to both {first} and {second}"
ERROR_WRITE_FAILED = "Failed to write generated module {path}: {error}"
