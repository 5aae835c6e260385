# ==============================================
# Type Mapper
# ==============================================
#
# PURPOSE:
#   Map a MySQL column type to the field type its documents will
#   carry in MongoDB, and cast decoded INSERT values to that type.
#
# FUNCTIONS:
# ----------
# - normalize_type(source_type) -> str
#       "INT(11) unsigned" -> "int"
#
# - map_type(source_type, column=None) -> FieldMapping
#       Pure lookup. Never raises: unknown or missing types map to
#       OPAQUE so a migration never stops on an odd column.
#       `column` only needs `length` and `enum_values` attributes.
#
# - cast_value(value, mapping) -> Any
#       Convert a decoded literal ("2024-01-01 10:00:00", 1, b"..")
#       into the value stored for that field. Raises ValueError when
#       the value cannot represent the field's type.
#
# ==============================================

from enum import Enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from bson.decimal128 import Decimal128


class FieldType(Enum):
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    STRING = "string"
    BINARY = "binary"
    TIMESTAMP = "timestamp"
    BOOLEAN = "boolean"
    ENUM = "enum"
    STRING_LIST = "string_list"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class FieldMapping:
    target_type: FieldType
    required: bool = False
    default: Any = None
    has_default: bool = False
    unique: bool = False
    enum_values: Optional[tuple[str, ...]] = None


TYPE_MAP = {
    # integers
    "int": FieldType.INTEGER,
    "integer": FieldType.INTEGER,
    "smallint": FieldType.INTEGER,
    "mediumint": FieldType.INTEGER,
    "bigint": FieldType.INTEGER,

    # floating point
    "float": FieldType.FLOAT,
    "double": FieldType.FLOAT,
    "real": FieldType.FLOAT,

    # exact (monetary) values
    "decimal": FieldType.DECIMAL,
    "numeric": FieldType.DECIMAL,

    # character data
    "varchar": FieldType.STRING,
    "char": FieldType.STRING,
    "text": FieldType.STRING,
    "tinytext": FieldType.STRING,
    "mediumtext": FieldType.STRING,
    "longtext": FieldType.STRING,

    # binary data
    "blob": FieldType.BINARY,
    "tinyblob": FieldType.BINARY,
    "mediumblob": FieldType.BINARY,
    "longblob": FieldType.BINARY,
    "binary": FieldType.BINARY,
    "varbinary": FieldType.BINARY,

    # temporal
    "date": FieldType.TIMESTAMP,
    "datetime": FieldType.TIMESTAMP,
    "timestamp": FieldType.TIMESTAMP,
    "time": FieldType.TIMESTAMP,
    "year": FieldType.TIMESTAMP,

    "json": FieldType.OPAQUE,
    "set": FieldType.STRING_LIST,
}


def normalize_type(source_type: Optional[str]) -> str:
    if not source_type:
        return ""
    base = str(source_type).lower().split("(")[0].strip()
    # modifiers such as "unsigned" or "precision" do not change the mapping
    return base.split()[0] if base else ""


def map_type(source_type: Optional[str], column: Any = None) -> FieldMapping:
    sql_type = normalize_type(source_type)

    if sql_type == "tinyint":
        length = getattr(column, "length", None)
        return FieldMapping(FieldType.BOOLEAN if length == "1" else FieldType.INTEGER)

    if sql_type == "enum":
        values = getattr(column, "enum_values", None) or ()
        return FieldMapping(
            FieldType.ENUM,
            enum_values=tuple(str(v).replace("'", "") for v in values),
        )

    return FieldMapping(TYPE_MAP.get(sql_type, FieldType.OPAQUE))


# ----------------------------------------------
# Value casting
# ----------------------------------------------

DATETIME_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%d",
    "%H:%M:%S",
    "%H:%M:%S.%f",
    "%Y",
]

BOOL_TRUE_VARIANTS = {"1", "true", "t", "yes", "y"}
BOOL_FALSE_VARIANTS = {"0", "false", "f", "no", "n"}


def _is_zero_date(value: str) -> bool:
    # MySQL "no date" placeholders: 0000-00-00, 0000-00-00 00:00:00, 0000
    return value == "" or value.startswith("0000")


def _parse_datetime(value: str) -> Optional[datetime]:
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value!r} is not an integer")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return _to_int(float(value))
    raise ValueError(f"cannot cast {type(value).__name__} to integer")


def _to_decimal(value: Any) -> Decimal128:
    if isinstance(value, (bytes, bytearray, bool)):
        raise ValueError(f"cannot cast {type(value).__name__} to decimal")
    try:
        return Decimal128(Decimal(str(value).strip()))
    except ArithmeticError:
        raise ValueError(f"{value!r} is not a decimal number") from None


def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        raise ValueError("cannot cast bool to timestamp")
    if isinstance(value, (int, float)):
        # YEAR columns dumped unquoted, e.g. 2024
        value = str(int(value))
    if isinstance(value, str):
        text = value.strip()
        if _is_zero_date(text):
            return None
        parsed = _parse_datetime(text)
        if parsed is not None:
            return parsed
        raise ValueError(f"{value!r} is not a recognized date/time")
    raise ValueError(f"cannot cast {type(value).__name__} to timestamp")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, bytes):
        return any(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in BOOL_TRUE_VARIANTS:
            return True
        if text in BOOL_FALSE_VARIANTS:
            return False
    raise ValueError(f"{value!r} is not a boolean")


def _to_str(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def cast_value(value: Any, mapping: FieldMapping) -> Any:
    """
    Cast one decoded value to the representation of its field.

    Args:
        value: Output of the value decoder (None, str, int, float, bytes)
        mapping: FieldMapping of the target field

    Returns:
        The value to store (None stays None)

    Raises:
        ValueError: if the value cannot be represented as the field type
    """
    if value is None:
        return None

    target = mapping.target_type

    if target == FieldType.INTEGER:
        return _to_int(value)

    if target == FieldType.FLOAT:
        if isinstance(value, (bytes, bytearray)):
            raise ValueError("cannot cast binary to float")
        return float(value)

    if target == FieldType.DECIMAL:
        return _to_decimal(value)

    if target == FieldType.STRING:
        return _to_str(value)

    if target == FieldType.BINARY:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        return str(value).encode("utf-8")

    if target == FieldType.TIMESTAMP:
        return _to_datetime(value)

    if target == FieldType.BOOLEAN:
        return _to_bool(value)

    if target == FieldType.ENUM:
        text = _to_str(value)
        if mapping.enum_values and text not in mapping.enum_values:
            raise ValueError(f"{text!r} is not one of {list(mapping.enum_values)}")
        return text

    if target == FieldType.STRING_LIST:
        if isinstance(value, list):
            return [_to_str(v) for v in value]
        text = _to_str(value)
        return [part for part in text.split(",") if part] if text else []

    return value
