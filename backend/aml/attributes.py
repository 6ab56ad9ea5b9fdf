"""Encode/decode the CAEX attribute blocks shared by both converters.

Covers the Identification, Characteristics and Visual blocks on
InternalElements, and PortCoordinate / FPD_Waypoint attributes on
ExternalInterfaces. Encoding always writes every slot of a block, leaving
out only the ``Value`` child of a missing field. Decoding is tolerant:
missing text decodes as ``""`` and missing numbers as ``0``.
"""

import math

from lxml import etree

from aml.caex import children, first_child, sub_element, text_element
from aml.mappings import ATTR_REFS
from models.fpb_model import (
    Characteristic,
    DescriptiveElement,
    Identification,
    Point,
    RelationalElement,
)

IDENTIFICATION_FIELDS = (
    "uniqueIdent", "longName", "shortName", "versionNumber", "revisionNumber",
)
DESCRIPTIVE_FIELDS = (
    "valueDeterminationProcess", "representivity", "setpointValue",
    "validityLimits", "actualValues",
)
RELATIONAL_FIELDS = ("view", "model", "regulationsForRelationalGeneration")

WAYPOINT_PREFIX = "FPD_Waypoint"
CHARACTERISTICS_DESCRIPTION = "Container for characteristics"


def numbered_name(base: str, index: int) -> str:
    """``base`` for the first item, then ``base1``, ``base2``, ..."""
    return base if index == 0 else f"{base}{index}"


def format_number(value: float | int) -> str:
    """Shortest text for a number: ``100`` rather than ``100.0``."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


# ---------------------------------------------------------------------------
# Primitive attributes
# ---------------------------------------------------------------------------

def add_attribute(
    parent: etree._Element,
    name: str,
    data_type: str = "xs:string",
    ref_type: str | None = None,
) -> etree._Element:
    return sub_element(
        parent, "Attribute", Name=name, AttributeDataType=data_type, RefAttributeType=ref_type,
    )


def add_string_attr(parent: etree._Element, name: str, value: str | None) -> None:
    attr = add_attribute(parent, name)
    if value is not None and value != "":
        text_element(attr, "Value", str(value))


def add_double_attr(parent: etree._Element, name: str, value: float | None) -> None:
    attr = add_attribute(parent, name, "xs:double")
    if value is not None:
        text_element(attr, "Value", format_number(value))


def find_attribute(parent: etree._Element | None, name: str) -> etree._Element | None:
    if parent is None:
        return None
    for attr in children(parent, "Attribute"):
        if attr.get("Name") == name:
            return attr
    return None


def attribute_value(parent: etree._Element | None, name: str) -> str:
    """Text of the named sub-attribute's ``Value``, or ``""``."""
    attr = find_attribute(parent, name)
    if attr is None:
        return ""
    value = first_child(attr, "Value")
    if value is None or value.text is None:
        return ""
    return value.text.strip()


def to_float(text: str) -> float | None:
    try:
        number = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


# ---------------------------------------------------------------------------
# Identification
# ---------------------------------------------------------------------------

def add_identification(parent: etree._Element, identification: Identification) -> None:
    attr = add_attribute(parent, "Identification", ref_type=ATTR_REFS["identification"])
    values = identification.model_dump(by_alias=True)
    for field in IDENTIFICATION_FIELDS:
        add_string_attr(attr, field, values.get(field))


def _decode_identification(attr: etree._Element, tagged: bool) -> Identification:
    values = {field: attribute_value(attr, field) for field in IDENTIFICATION_FIELDS}
    if tagged:
        values["$type"] = "fpb:Identification"
    return Identification.model_validate(values)


def parse_identification(elem: etree._Element) -> Identification | None:
    attr = find_attribute(elem, "Identification")
    if attr is None:
        return None
    return _decode_identification(attr, tagged=True)


def parse_unique_ident(elem: etree._Element) -> str | None:
    """The element's identification ``uniqueIdent``, if it has a non-empty one."""
    return attribute_value(find_attribute(elem, "Identification"), "uniqueIdent") or None


# ---------------------------------------------------------------------------
# Characteristics
# ---------------------------------------------------------------------------

def add_characteristics(parent: etree._Element, characteristics: list[Characteristic]) -> None:
    container = add_attribute(parent, "Characteristics")
    text_element(container, "Description", CHARACTERISTICS_DESCRIPTION)

    for index, characteristic in enumerate(characteristics or []):
        c_attr = add_attribute(
            container, numbered_name("Characteristic", index),
            ref_type=ATTR_REFS["characteristic"],
        )
        if characteristic.identification is not None:
            add_identification(c_attr, characteristic.identification)
        if characteristic.descriptive_element is not None:
            desc = add_attribute(c_attr, "DescriptiveElement")
            values = characteristic.descriptive_element.model_dump(by_alias=True)
            for field in DESCRIPTIVE_FIELDS:
                add_string_attr(desc, field, values.get(field))
        if characteristic.relational_element is not None:
            rel = add_attribute(c_attr, "RelationalElement")
            values = characteristic.relational_element.model_dump(by_alias=True)
            for field in RELATIONAL_FIELDS:
                add_string_attr(rel, field, values.get(field))


def parse_characteristics(elem: etree._Element) -> list[Characteristic]:
    container = find_attribute(elem, "Characteristics")
    if container is None:
        return []

    characteristics: list[Characteristic] = []
    for c_attr in children(container, "Attribute"):
        if not (c_attr.get("Name") or "").startswith("Characteristic"):
            continue
        characteristic = Characteristic()

        ident = find_attribute(c_attr, "Identification")
        if ident is not None:
            characteristic.identification = _decode_identification(ident, tagged=False)

        desc = find_attribute(c_attr, "DescriptiveElement")
        if desc is not None:
            characteristic.descriptive_element = DescriptiveElement.model_validate(
                {field: attribute_value(desc, field) for field in DESCRIPTIVE_FIELDS}
            )

        rel = find_attribute(c_attr, "RelationalElement")
        if rel is not None:
            characteristic.relational_element = RelationalElement.model_validate(
                {field: attribute_value(rel, field) for field in RELATIONAL_FIELDS}
            )

        characteristics.append(characteristic)
    return characteristics


# ---------------------------------------------------------------------------
# Element visual
# ---------------------------------------------------------------------------

def _add_coordinate(
    parent: etree._Element, name: str, x: float | None, y: float | None
) -> None:
    attr = add_attribute(parent, name, ref_type=ATTR_REFS["coordinate"])
    add_double_attr(attr, "x", x)
    add_double_attr(attr, "y", y)


def add_visual(
    parent: etree._Element,
    x: float | None,
    y: float | None,
    width: float | None,
    height: float | None,
) -> None:
    attr = add_attribute(parent, "Visual", ref_type=ATTR_REFS["element_visual"])
    _add_coordinate(attr, "position", x, y)
    add_double_attr(attr, "width", width)
    add_double_attr(attr, "height", height)


def parse_visual(elem: etree._Element) -> dict[str, float] | None:
    """Decode ``Visual`` into x/y/width/height.

    Missing numbers decode as 0; a block that is all zeros counts as absent.
    """
    visual = find_attribute(elem, "Visual")
    if visual is None:
        return None

    position = find_attribute(visual, "position")
    geometry = {
        "x": to_float(attribute_value(position, "x")) or 0.0,
        "y": to_float(attribute_value(position, "y")) or 0.0,
        "width": to_float(attribute_value(visual, "width")) or 0.0,
        "height": to_float(attribute_value(visual, "height")) or 0.0,
    }
    if not any(geometry.values()):
        return None
    return geometry


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------

def add_port_coordinate(parent: etree._Element, x: float | None, y: float | None) -> None:
    """Add ``PortCoordinate``; None values leave the x/y slots empty."""
    _add_coordinate(parent, "PortCoordinate", x, y)


def add_waypoint(parent: etree._Element, index: int, x: float, y: float) -> None:
    attr = add_attribute(
        parent, numbered_name(WAYPOINT_PREFIX, index), ref_type=ATTR_REFS["waypoint"]
    )
    _add_coordinate(attr, "position", x, y)


def parse_port_coordinate(ext_if: etree._Element) -> Point | None:
    attr = find_attribute(ext_if, "PortCoordinate")
    if attr is None:
        return None
    x = to_float(attribute_value(attr, "x"))
    y = to_float(attribute_value(attr, "y"))
    if x is None or y is None:
        return None
    return Point(x=x, y=y)


def parse_waypoints(ext_if: etree._Element) -> list[Point]:
    """Decode ``FPD_Waypoint``, ``FPD_Waypoint1``, ... ordered by their suffix."""
    indexed: list[tuple[int, Point]] = []
    for attr in children(ext_if, "Attribute"):
        name = attr.get("Name") or ""
        if not name.startswith(WAYPOINT_PREFIX):
            continue
        suffix = name[len(WAYPOINT_PREFIX):]
        if suffix and not (suffix.isascii() and suffix.isdigit()):
            continue
        position = find_attribute(attr, "position")
        if position is None:
            continue
        x = to_float(attribute_value(position, "x"))
        y = to_float(attribute_value(position, "y"))
        if x is None or y is None:
            continue
        indexed.append((int(suffix) if suffix else 0, Point(x=x, y=y)))

    indexed.sort(key=lambda item: item[0])
    return [point for _, point in indexed]
