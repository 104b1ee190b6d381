"""JSON, XML and YAML hooks for Optional values.

Encoding writes null (or nothing, for XML) when a value is absent and the
encoded value otherwise. Decoding always produces a present Optional, even for
a zero value, with one exception: YAML null leaves the container untouched.

Decoding JSON null gives a present Optional holding the zero value, matching
how the standard library treats an explicit null. Omitting absent fields from
records is an explicit ``omit_absent`` flag rather than a property of how the
container is held.
"""

from __future__ import annotations

import base64
import json
import re
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Any, Mapping

import yaml

from typed_optional.coercion import format_float, format_timestamp
from typed_optional.destination import Ref, deref
from typed_optional.errors import RangeError
from typed_optional.optional import Optional
from typed_optional.types import ANY, Kind, TypeDefinition, is_bytes_type

_FRACTION_PATTERN = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(text: str) -> datetime:
    """Parse RFC 3339 text, truncating fractional seconds to microseconds."""
    text = _FRACTION_PATTERN.sub(r"\1", text.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _decoded(value: Any, type_def: TypeDefinition) -> Optional[Any]:
    """Return a present Optional of type_def holding a decoded value.

    None gives the zero value. Untyped Optionals keep the value as decoded;
    typed ones coerce it with the same rules as a database scan.
    """
    if value is None:
        return Optional(type_def, type_def.zero_value(), present=True)
    if type_def.kind is Kind.ANY:
        return Optional(type_def, value, present=True)
    if isinstance(value, int) and not isinstance(value, bool):
        unsigned = _decoded_unsigned(value, type_def)
        if unsigned is not None:
            return unsigned
    opt: Optional[Any] = Optional(type_def)
    opt.scan(value)
    return opt


def _decoded_unsigned(value: int, type_def: TypeDefinition) -> Optional[Any] | None:
    """Decode an integer into an unsigned type (or a pointer to one).

    Documents carry the full uint64 range, which a database scan does not, so
    these are range-checked here instead of going through Optional.scan.
    Returns None for any other destination.
    """
    base = type_def.resolve_base_type()
    target = None
    if base.is_pointer:
        target = base.target  # type: ignore[attr-defined]
        base = target.resolve_base_type()
    if not base.kind.is_unsigned_integer:
        return None
    low, high = base.kind.integer_range()
    if value < low or value > high:
        raise RangeError(value, str(value), type_def, base.kind)
    if target is not None:
        return Optional(type_def, Ref(target, value), present=True)
    return Optional(type_def, value, present=True)


# JSON


def _json_value(value: Any) -> Any:
    value = deref(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


def _from_json_value(value: Any, type_def: TypeDefinition) -> Optional[Any]:
    if isinstance(value, str):
        base = type_def.resolve_base_type()
        if base.is_pointer:
            base = base.target.resolve_base_type()  # type: ignore[attr-defined]
        if is_bytes_type(base):
            value = base64.b64decode(value, validate=True)
        elif base.kind is Kind.TIMESTAMP:
            value = parse_timestamp(value)
    return _decoded(value, type_def)


class OptionalJSONEncoder(json.JSONEncoder):
    """JSON encoder writing absent Optionals as null and present ones as their value."""

    def default(self, o: Any) -> Any:
        if isinstance(o, Optional):
            value, present = o.get()
            return _json_value(value) if present else None
        if isinstance(o, (bytes, bytearray, memoryview, datetime, Ref)):
            return _json_value(o)
        return super().default(o)


def to_json(opt: Optional[Any], **kwargs: Any) -> str:
    """Encode an Optional as JSON; an absent value is written as null."""
    return json.dumps(opt, cls=OptionalJSONEncoder, **kwargs)


def from_json(text: str | bytes, type_def: TypeDefinition = ANY) -> Optional[Any]:
    """Decode JSON into a present Optional of type_def. null gives the zero value."""
    return _from_json_value(json.loads(text), type_def)


def dump_json_fields(fields: Mapping[str, Optional[Any]], omit_absent: bool = True, **kwargs: Any) -> str:
    """Encode a record of Optionals as a JSON object.

    Absent fields are left out when omit_absent is set, otherwise written as null.
    """
    record = {name: opt for name, opt in fields.items() if not (omit_absent and opt.is_zero())}
    return json.dumps(record, cls=OptionalJSONEncoder, **kwargs)


def load_json_fields(text: str | bytes, fields: Mapping[str, Optional[Any]]) -> dict[str, Optional[Any]]:
    """Decode a JSON object into a record of Optionals.

    fields gives each field's current Optional and therefore its type. A key
    present in the document (null included) replaces the field with a present
    Optional; a missing key keeps the current one. Unknown keys are ignored.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    result = dict(fields)
    for name, current in fields.items():
        if name in data:
            result[name] = _from_json_value(data[name], current.type_def)
    return result


# XML


def _xml_text(value: Any) -> str | None:
    value = deref(value)
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, datetime):
        return format_timestamp(value)
    return str(value)


def to_xml_element(opt: Optional[Any], tag: str) -> ET.Element | None:
    """Return an element holding the value, or None when absent so nothing is written."""
    value, present = opt.get()
    if not present:
        return None
    element = ET.Element(tag)
    element.text = _xml_text(value)
    return element


def to_xml(opt: Optional[Any], tag: str) -> str:
    """Encode an Optional as an XML element; an absent value encodes to ''."""
    element = to_xml_element(opt, tag)
    if element is None:
        return ""
    return ET.tostring(element, encoding="unicode")


def from_xml_element(element: ET.Element, type_def: TypeDefinition = ANY) -> Optional[Any]:
    """Decode an element's text into a present Optional of type_def.

    An element without text gives the zero value.
    """
    text = element.text or ""
    if not text:
        return Optional(type_def, type_def.zero_value(), present=True)
    base = type_def.resolve_base_type()
    if base.kind is Kind.TIMESTAMP:
        return _decoded(parse_timestamp(text), type_def)
    return _decoded(text, type_def)


def from_xml(text: str | bytes, type_def: TypeDefinition = ANY) -> Optional[Any]:
    """Decode a single XML element into a present Optional of type_def."""
    return from_xml_element(ET.fromstring(text), type_def)


# YAML


def _yaml_value(value: Any) -> Any:
    value = deref(value)
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return value


def _represent_optional(dumper: yaml.SafeDumper, opt: Optional[Any]) -> yaml.Node:
    value, present = opt.get()
    if not present:
        return dumper.represent_none(None)
    return dumper.represent_data(_yaml_value(value))


def register_yaml_representer(dumper: type[yaml.SafeDumper] = yaml.SafeDumper) -> None:
    """Teach a PyYAML dumper class to write Optionals as null or their value."""
    dumper.add_representer(Optional, _represent_optional)


def to_yaml(opt: Optional[Any]) -> str:
    """Encode an Optional as a YAML document; an absent value is written as null."""
    value, present = opt.get()
    return yaml.safe_dump(_yaml_value(value) if present else None)


def from_yaml(
    text: str | bytes,
    type_def: TypeDefinition = ANY,
    existing: Optional[Any] | None = None,
) -> Optional[Any]:
    """Decode a YAML document into a present Optional of type_def.

    A null or empty document is skipped: existing is returned untouched, or an
    empty Optional when there is none.
    """
    data = yaml.safe_load(text)
    if data is None:
        return existing if existing is not None else Optional(type_def)
    return _decoded(data, type_def)


def dump_yaml_fields(fields: Mapping[str, Optional[Any]], omit_absent: bool = True) -> str:
    """Encode a record of Optionals as a YAML mapping.

    Absent fields are left out when omit_absent is set, otherwise written as null.
    """
    record = {
        name: (_yaml_value(opt.get()[0]) if opt.is_present() else None)
        for name, opt in fields.items()
        if not (omit_absent and opt.is_zero())
    }
    return yaml.safe_dump(record, sort_keys=False)


def load_yaml_fields(text: str | bytes, fields: Mapping[str, Optional[Any]]) -> dict[str, Optional[Any]]:
    """Decode a YAML mapping into a record of Optionals.

    Keys that are missing or hold null keep the current Optional; every other
    key replaces the field with a present Optional.
    """
    data = yaml.safe_load(text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    result = dict(fields)
    for name, current in fields.items():
        value = data.get(name)
        if value is not None:
            result[name] = _decoded(value, current.type_def)
    return result
