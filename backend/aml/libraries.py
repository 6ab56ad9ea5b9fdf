"""Static FPD library definitions appended to every generated AML file.

Mirrors VDI3682_Lib_v0.1.aml: the interface classes for ports, the system
unit classes for FPD objects and processes, and the attribute types
referenced by Identification, Characteristic and visual attributes.
"""

from lxml import etree

from aml.caex import sub_element, text_element
from aml.mappings import ATTR_REFS, FLOW_TO_INTERFACE, base_name

LIBRARY_VERSION = "1.0.0"

_PORT_CLASS = "FPD_InterfaceClassLib/FPD_Port"
_OBJECT_CLASS = "FPD_SystemUnitClassLib/FPD_Object"
_STATE_CLASS = "FPD_SystemUnitClassLib/FPD_State"

_IDENTIFICATION_FIELDS = (
    "uniqueIdent", "longName", "shortName", "versionNumber", "revisionNumber",
)


def _versioned(parent: etree._Element, tag: str, **attributes: str | None) -> etree._Element:
    elem = sub_element(parent, tag, **attributes)
    text_element(elem, "Version", LIBRARY_VERSION)
    return elem


def _empty_attr(parent: etree._Element, name: str, data_type: str = "xs:string") -> None:
    sub_element(parent, "Attribute", Name=name, AttributeDataType=data_type)


def _coordinate_attr(parent: etree._Element, name: str) -> None:
    attr = sub_element(
        parent, "Attribute",
        Name=name, AttributeDataType="xs:string", RefAttributeType=ATTR_REFS["coordinate"],
    )
    _empty_attr(attr, "x", "xs:double")
    _empty_attr(attr, "y", "xs:double")


def _identification_attr(parent: etree._Element) -> etree._Element:
    attr = sub_element(
        parent, "Attribute",
        Name="Identification", AttributeDataType="xs:string",
        RefAttributeType=ATTR_REFS["identification"],
    )
    for field in _IDENTIFICATION_FIELDS:
        _empty_attr(attr, field)
    return attr


def _visual_attr(parent: etree._Element) -> None:
    attr = sub_element(
        parent, "Attribute",
        Name="Visual", AttributeDataType="xs:string",
        RefAttributeType=ATTR_REFS["element_visual"],
    )
    _coordinate_attr(attr, "position")
    _empty_attr(attr, "width", "xs:double")
    _empty_attr(attr, "height", "xs:double")


def _interface_class_lib(root: etree._Element) -> None:
    icl = _versioned(root, "InterfaceClassLib", Name="FPD_InterfaceClassLib")

    port = _versioned(icl, "InterfaceClass", Name="FPD_Port")
    _coordinate_attr(port, "PortCoordinate")

    names: list[str] = []
    for classes in FLOW_TO_INTERFACE.values():
        for path in (classes.in_, classes.out):
            if base_name(path) not in names:
                names.append(base_name(path))
    for name in names:
        _versioned(icl, "InterfaceClass", Name=name, RefBaseClassPath=_PORT_CLASS)


def _system_unit_class_lib(root: etree._Element) -> None:
    sucl = _versioned(root, "SystemUnitClassLib", Name="FPD_SystemUnitClassLib")

    obj = _versioned(sucl, "SystemUnitClass", Name="FPD_Object")
    _identification_attr(obj)
    characteristics = sub_element(
        obj, "Attribute", Name="Characteristics", AttributeDataType="xs:string"
    )
    text_element(characteristics, "Description", "Container for characteristics")
    _visual_attr(obj)

    for name in ("FPD_SystemLimit", "FPD_ProcessOperator", "FPD_TechnicalResource", "FPD_State"):
        _versioned(sucl, "SystemUnitClass", Name=name, RefBaseClassPath=_OBJECT_CLASS)
    for name in ("FPD_Product", "FPD_Information", "FPD_Energy"):
        _versioned(sucl, "SystemUnitClass", Name=name, RefBaseClassPath=_STATE_CLASS)

    process = _versioned(sucl, "SystemUnitClass", Name="FPD_Process")
    sub_element(
        process, "InternalElement",
        Name="SystemLimit", RefBaseSystemUnitPath="FPD_SystemUnitClassLib/FPD_SystemLimit",
    )


def _attribute_type_lib(root: etree._Element) -> None:
    atl = _versioned(root, "AttributeTypeLib", Name="FPD_AttributeTypeLib")

    ident = _versioned(atl, "AttributeType", Name="FPD_Identification", AttributeDataType="xs:string")
    for field in _IDENTIFICATION_FIELDS:
        _empty_attr(ident, field)

    charac = _versioned(atl, "AttributeType", Name="FPD_Characteristic", AttributeDataType="xs:string")
    _identification_attr(charac)
    desc = sub_element(charac, "Attribute", Name="DescriptiveElement", AttributeDataType="xs:string")
    for field in (
        "valueDeterminationProcess", "representivity", "setpointValue",
        "validityLimits", "actualValues",
    ):
        _empty_attr(desc, field)
    rel = sub_element(charac, "Attribute", Name="RelationalElement", AttributeDataType="xs:string")
    for field in ("view", "model", "regulationsForRelationalGeneration"):
        _empty_attr(rel, field)


def _visual_attribute_type_lib(root: etree._Element) -> None:
    vatl = _versioned(root, "AttributeTypeLib", Name="FPD_VisualAttributeTypeLib")

    visual = _versioned(vatl, "AttributeType", Name="FPD_ElementVisual", AttributeDataType="xs:string")
    _coordinate_attr(visual, "position")
    _empty_attr(visual, "width", "xs:double")
    _empty_attr(visual, "height", "xs:double")

    waypoint = _versioned(vatl, "AttributeType", Name="FPD_Waypoint", AttributeDataType="xs:string")
    _coordinate_attr(waypoint, "position")

    coordinate = _versioned(vatl, "AttributeType", Name="FPD_Coordinate", AttributeDataType="xs:string")
    _empty_attr(coordinate, "x", "xs:double")
    _empty_attr(coordinate, "y", "xs:double")


def append_libraries(root: etree._Element) -> None:
    """Append the four FPD library branches to a ``CAEXFile`` root."""
    _interface_class_lib(root)
    _system_unit_class_lib(root)
    _attribute_type_lib(root)
    _visual_attribute_type_lib(root)
