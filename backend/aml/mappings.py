"""Type mappings between FPB.JS element/flow kinds and AutomationML classes."""

from enum import Enum
from typing import NamedTuple

from models.fpb_model import ElementType, FlowType

SYSTEM_UNIT_CLASS_LIB = "FPD_SystemUnitClassLib"
INTERFACE_CLASS_LIB = "FPD_InterfaceClassLib"

PROCESS_SUC = f"{SYSTEM_UNIT_CLASS_LIB}/FPD_Process"

# Element kind -> AML SystemUnitClass path
ELEMENT_TO_SUC: dict[ElementType, str] = {
    ElementType.PRODUCT: f"{SYSTEM_UNIT_CLASS_LIB}/FPD_Product",
    ElementType.ENERGY: f"{SYSTEM_UNIT_CLASS_LIB}/FPD_Energy",
    ElementType.INFORMATION: f"{SYSTEM_UNIT_CLASS_LIB}/FPD_Information",
    ElementType.PROCESS_OPERATOR: f"{SYSTEM_UNIT_CLASS_LIB}/FPD_ProcessOperator",
    ElementType.TECHNICAL_RESOURCE: f"{SYSTEM_UNIT_CLASS_LIB}/FPD_TechnicalResource",
    ElementType.SYSTEM_LIMIT: f"{SYSTEM_UNIT_CLASS_LIB}/FPD_SystemLimit",
}

SUC_TO_ELEMENT: dict[str, ElementType] = {v: k for k, v in ELEMENT_TO_SUC.items()}


class PortDirection(str, Enum):
    OUT = "out"
    IN = "in"


class PortClasses(NamedTuple):
    """InterfaceClass paths for the source (out) and target (in) end of a flow."""
    out: str
    in_: str


class PortInfo(NamedTuple):
    flow_type: FlowType
    direction: PortDirection


# Flow kind -> AML InterfaceClass paths
FLOW_TO_INTERFACE: dict[FlowType, PortClasses] = {
    FlowType.FLOW: PortClasses(
        f"{INTERFACE_CLASS_LIB}/FPD_FlowOut", f"{INTERFACE_CLASS_LIB}/FPD_FlowIn"
    ),
    FlowType.PARALLEL_FLOW: PortClasses(
        f"{INTERFACE_CLASS_LIB}/FPD_ParallelFlowOut",
        f"{INTERFACE_CLASS_LIB}/FPD_ParallelFlowIn",
    ),
    FlowType.ALTERNATIVE_FLOW: PortClasses(
        f"{INTERFACE_CLASS_LIB}/FPD_AlternativeFlowOut",
        f"{INTERFACE_CLASS_LIB}/FPD_AlternativeFlowIn",
    ),
    # Usage is undirected in AML: one class serves both ends
    FlowType.USAGE: PortClasses(
        f"{INTERFACE_CLASS_LIB}/FPD_Usage", f"{INTERFACE_CLASS_LIB}/FPD_Usage"
    ),
}


def _build_interface_index() -> dict[str, PortInfo]:
    index: dict[str, PortInfo] = {}
    for flow_type, classes in FLOW_TO_INTERFACE.items():
        index[classes.out] = PortInfo(flow_type, PortDirection.OUT)
        if classes.in_ != classes.out:
            index[classes.in_] = PortInfo(flow_type, PortDirection.IN)
    return index


# AML InterfaceClass path -> (flow kind, direction)
INTERFACE_TO_FLOW: dict[str, PortInfo] = _build_interface_index()

# AML AttributeType references
ATTR_REFS = {
    "identification": "FPD_AttributeTypeLib/FPD_Identification",
    "characteristic": "FPD_AttributeTypeLib/FPD_Characteristic",
    "element_visual": "FPD_VisualAttributeTypeLib/FPD_ElementVisual",
    "coordinate": "FPD_VisualAttributeTypeLib/FPD_Coordinate",
    "waypoint": "FPD_VisualAttributeTypeLib/FPD_Waypoint",
}


def element_class(element_type: ElementType | str) -> str:
    """Return the SystemUnitClass path for an element kind."""
    return ELEMENT_TO_SUC[ElementType(element_type)]


def element_type_for_class(suc_path: str | None) -> ElementType | None:
    """Return the element kind for a SystemUnitClass path, or None if unmapped."""
    if suc_path is None:
        return None
    return SUC_TO_ELEMENT.get(suc_path)


def port_classes(flow_type: FlowType | str) -> PortClasses:
    """Return the (out, in) InterfaceClass paths for a flow kind."""
    return FLOW_TO_INTERFACE[FlowType(flow_type)]


def port_info(interface_class: str | None) -> PortInfo | None:
    """Return (flow kind, direction) for an InterfaceClass path, or None."""
    if interface_class is None:
        return None
    return INTERFACE_TO_FLOW.get(interface_class)


def base_name(class_path: str) -> str:
    """Last segment of a library path, e.g. ``FPD_FlowOut``."""
    return class_path.rsplit("/", 1)[-1]
