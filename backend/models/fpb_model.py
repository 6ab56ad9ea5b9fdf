"""Pydantic data models for FPB.JS (VDI 3682) graph-form elements.

Records are keyed in camelCase on the wire and tagged with ``$type``. Each
record only carries the fields that were given when it was built, so models
are dumped with ``exclude_unset=True`` to reproduce the loose FPB.JS shapes.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ElementType(str, Enum):
    """Node kinds of a Formalized Process Description."""
    PRODUCT = "fpb:Product"
    ENERGY = "fpb:Energy"
    INFORMATION = "fpb:Information"
    PROCESS_OPERATOR = "fpb:ProcessOperator"
    TECHNICAL_RESOURCE = "fpb:TechnicalResource"
    SYSTEM_LIMIT = "fpb:SystemLimit"


class FlowType(str, Enum):
    """Edge kinds of a Formalized Process Description."""
    FLOW = "fpb:Flow"
    PARALLEL_FLOW = "fpb:ParallelFlow"
    ALTERNATIVE_FLOW = "fpb:AlternativeFlow"
    USAGE = "fpb:Usage"


STATE_TYPES = frozenset({ElementType.PRODUCT, ElementType.ENERGY, ElementType.INFORMATION})

# Edge kinds whose siblings with a shared source form a tandem group
TANDEM_FLOW_TYPES = frozenset({FlowType.PARALLEL_FLOW, FlowType.ALTERNATIVE_FLOW})


class FpbRecord(BaseModel):
    """Base for all FPB.JS records: camelCase aliases, unknown keys tolerated."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_json(self) -> dict[str, Any]:
        """Dump the record in FPB.JS wire shape."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


# ---------------------------------------------------------------------------
# Metadata blocks
# ---------------------------------------------------------------------------

class Identification(FpbRecord):
    """VDI 3682 identification block."""
    type: Optional[Literal["fpb:Identification"]] = Field(default=None, alias="$type")
    unique_ident: Optional[str] = None
    long_name: Optional[str] = None
    short_name: Optional[str] = None
    version_number: Optional[str] = None
    revision_number: Optional[str] = None


class DescriptiveElement(FpbRecord):
    value_determination_process: Optional[str] = None
    representivity: Optional[str] = None
    setpoint_value: Optional[str] = None
    validity_limits: Optional[str] = None
    actual_values: Optional[str] = None


class RelationalElement(FpbRecord):
    view: Optional[str] = None
    model: Optional[str] = None
    regulations_for_relational_generation: Optional[str] = None


class Characteristic(FpbRecord):
    """One characteristic with up to three optional sub-blocks."""
    identification: Optional[Identification] = None
    descriptive_element: Optional[DescriptiveElement] = None
    relational_element: Optional[RelationalElement] = None


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------

class FpbObject(FpbRecord):
    """Fields shared by every node kind."""
    id: str
    name: Optional[str] = None
    identification: Optional[Identification] = None
    characteristics: list[Characteristic] = Field(default_factory=list)
    incoming: list[str] = Field(default_factory=list)
    outgoing: list[str] = Field(default_factory=list)
    is_assigned_to: list[str] = Field(default_factory=list)


class State(FpbObject):
    """A Product, Energy or Information state."""
    type: Literal["fpb:Product", "fpb:Energy", "fpb:Information"] = Field(alias="$type")


class ProcessOperator(FpbObject):
    type: Literal["fpb:ProcessOperator"] = Field(alias="$type")
    decomposed_view: Optional[str] = None


class TechnicalResource(FpbObject):
    type: Literal["fpb:TechnicalResource"] = Field(alias="$type")


class SystemLimit(FpbObject):
    """Boundary of one process; lists every element and flow it scopes."""
    type: Literal["fpb:SystemLimit"] = Field(alias="$type")
    elements_container: list[str] = Field(default_factory=list)


class Flow(FpbRecord):
    """A directed connection of any of the four edge kinds."""
    type: Literal[
        "fpb:Flow", "fpb:ParallelFlow", "fpb:AlternativeFlow", "fpb:Usage"
    ] = Field(alias="$type")
    id: str
    source_ref: str
    target_ref: str
    in_tandem_with: Optional[list[str]] = None


ElementData = Annotated[
    Union[State, ProcessOperator, TechnicalResource, SystemLimit, Flow],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Visual information
# ---------------------------------------------------------------------------

class Point(FpbRecord):
    x: float
    y: float


class Waypoint(FpbRecord):
    """A flow waypoint; docking points carry the unsnapped ``original`` position."""
    x: float
    y: float
    original: Optional[Point] = None


class VisualInformation(FpbRecord):
    """Geometry of an element (x/y/width/height) or a flow (waypoints)."""
    id: str
    type: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    waypoints: Optional[list[Waypoint]] = None
    markers: Optional[dict[str, Any]] = None
