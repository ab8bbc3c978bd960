"""urlform: application/x-www-form-urlencoded meets Python types.

All public types are exported from this module for flat imports:

    from urlform import decode, encode, DecodeOptions, ParseError
"""

__version__ = "0.1.0"

# Options, see urlform._config for details
from urlform._config import (
    CodecConfig,
    ConfigParseError,
    DecodeOptions,
    EncodeOptions,
    parse_codec_config,
)

# Entry points
from urlform._decoder import Decoder, decode
from urlform._encoder import Encoder, encode

# Errors
from urlform._errors import (
    CodecError,
    DuplicateKeyError,
    EncodingError,
    InvalidLengthError,
    MissingFieldError,
    NoKeyError,
    ParseError,
    ShapeError,
    TopLevelError,
    UnitVariantError,
    UnsupportedKeyError,
    UnsupportedPairError,
    UnsupportedTypeError,
    UnsupportedValueError,
)

# Pair source and sink
from urlform._pairs import FormSink, Part, QueryPairs

# Registry, see urlform._registry for details
from urlform._registry import (
    DEFAULT_REGISTRY,
    Conversion,
    Registry,
    RegistryBuilder,
    register_builtin_scalars,
    register_standard_scalars,
)

# Sized scalars
from urlform._scalars import (
    Char,
    Int8,
    Int16,
    Int32,
    Int64,
    Int128,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    UInt128,
)

# Shape model
from urlform._shapes import Shape, shape_of
from urlform._types import PairSink, PairSource

__all__ = [
    # Entry points
    "decode",
    "encode",
    "Decoder",
    "Encoder",
    # Protocols
    "PairSource",
    "PairSink",
    # Pair source and sink
    "Part",
    "QueryPairs",
    "FormSink",
    # Options
    "DecodeOptions",
    "EncodeOptions",
    "CodecConfig",
    "ConfigParseError",
    "parse_codec_config",
    # Registry
    "RegistryBuilder",
    "Registry",
    "Conversion",
    "DEFAULT_REGISTRY",
    "register_builtin_scalars",
    "register_standard_scalars",
    # Shape model
    "Shape",
    "shape_of",
    # Sized scalars
    "Char",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Int128",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt128",
    # Errors
    "CodecError",
    "ShapeError",
    "TopLevelError",
    "InvalidLengthError",
    "DuplicateKeyError",
    "MissingFieldError",
    "UnsupportedKeyError",
    "UnsupportedValueError",
    "UnsupportedPairError",
    "NoKeyError",
    "UnitVariantError",
    "ParseError",
    "EncodingError",
    "UnsupportedTypeError",
]
