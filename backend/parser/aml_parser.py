"""Parser that converts an AutomationML (CAEX 3.0) document into an FpbDocument.

Flows are reconstructed from ExternalInterface/InternalLink pairs: every
link joins an outgoing port on the source element with an incoming port on
the target element. Nested ``FPD_Process`` elements inside a
ProcessOperator become decomposed processes sharing the operator's id.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from lxml import etree

from aml.attributes import (
    parse_characteristics,
    parse_identification,
    parse_port_coordinate,
    parse_unique_ident,
    parse_visual,
    parse_waypoints,
)
from aml.caex import children, local_name, parse_xml
from aml.mappings import (
    PROCESS_SUC,
    PortDirection,
    element_class,
    element_type_for_class,
    port_info,
)
from config import settings
from models.fpb_model import (
    STATE_TYPES,
    TANDEM_FLOW_TYPES,
    ElementType,
    Flow,
    FlowType,
    FpbObject,
    Point,
    ProcessOperator,
    State,
    SystemLimit,
    TechnicalResource,
    VisualInformation,
    Waypoint,
)
from models.process_model import FpbDocument, Process, ProcessEntry, Project
from services.identifiers import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)


class AmlParseError(Exception):
    """Error raised when an AML document cannot be converted."""


_OBJECT_MODELS: dict[ElementType, type[FpbObject]] = {
    ElementType.PRODUCT: State,
    ElementType.ENERGY: State,
    ElementType.INFORMATION: State,
    ElementType.PROCESS_OPERATOR: ProcessOperator,
    ElementType.TECHNICAL_RESOURCE: TechnicalResource,
}


@dataclass
class _Port:
    """One ExternalInterface, resolved to its owner and flow semantics."""
    owner: str  # tree ID of the owning InternalElement
    flow_type: FlowType
    direction: PortDirection
    coordinate: Point | None
    waypoints: list[Point] = field(default_factory=list)


@dataclass
class _Scope:
    """Lookups for one process level."""
    element_ids: dict[str, str] = field(default_factory=dict)  # tree ID -> graph id
    objects: dict[str, FpbObject] = field(default_factory=dict)  # graph id -> element
    ports: dict[str, _Port] = field(default_factory=dict)


def _find_by_suc(elements: list[etree._Element], suc_path: str) -> etree._Element | None:
    for ie in elements:
        if ie.get("RefBaseSystemUnitPath") == suc_path:
            return ie
    return None


def _add_unique(ids: list[str], value: str) -> None:
    if value not in ids:
        ids.append(value)


class AmlParser:
    """Parser that converts CAEX text (or a parsed tree) into an FpbDocument."""

    def __init__(
        self,
        source: str | bytes | etree._Element,
        id_generator: IdGenerator | None = None,
        max_depth: int | None = None,
    ) -> None:
        self.source = source
        self.new_id = id_generator or UuidIdGenerator()
        self.max_depth = max_depth or settings.max_decomposition_depth
        self.warnings: list[str] = []
        # process id -> id of the ProcessOperator it decomposes
        self.decomposition: dict[str, str] = {}
        self._entries: list[ProcessEntry] = []
        self._used_ids: set[str] = set()

    def parse(self) -> FpbDocument:
        """Parse the source and return the FPB.JS document, header first.

        Raises:
            AmlParseError: If the XML is malformed or lacks an
                InstanceHierarchy or top-level FPD_Process.
        """
        root = self._load()

        hierarchies = children(root, "InstanceHierarchy")
        if not hierarchies:
            raise AmlParseError("No InstanceHierarchy found")

        top_process = _find_by_suc(children(hierarchies[0], "InternalElement"), PROCESS_SUC)
        if top_process is None:
            raise AmlParseError("No FPD_Process found in InstanceHierarchy")

        self.warnings = []
        self.decomposition = {}
        self._entries = []
        self._used_ids = set()

        entry_point = self._parse_process(top_process, None, depth=1)

        project = Project(
            type="fpb:Project",
            name=settings.project_name,
            target_namespace=settings.target_namespace,
            entry_point=entry_point,
        )
        return FpbDocument(project=project, processes=self._entries)

    def _load(self) -> etree._Element:
        if isinstance(self.source, etree._Element):
            root = self.source
        else:
            try:
                root = parse_xml(self.source)
            except etree.XMLSyntaxError as exc:
                raise AmlParseError(f"Invalid XML: {exc}") from exc
        if local_name(root) != "CAEXFile":
            raise AmlParseError(f"Expected CAEXFile root element, found '{local_name(root)}'")
        return root

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)

    # -- Process levels --

    def _parse_process(
        self,
        process_ie: etree._Element,
        parent_operator_id: str | None,
        depth: int,
    ) -> str:
        """Parse one FPD_Process element, append its entry, and return its id."""
        if depth > self.max_depth:
            raise AmlParseError(f"Decomposition deeper than {self.max_depth} levels")

        child_ies = children(process_ie, "InternalElement")
        system_limit_ie = _find_by_suc(child_ies, element_class(ElementType.SYSTEM_LIMIT))

        elements: list = []
        visuals: list[VisualInformation] = []

        system_limit: SystemLimit | None = None
        if system_limit_ie is not None:
            system_limit = SystemLimit(
                type=ElementType.SYSTEM_LIMIT.value,
                id=self.new_id(),
                elements_container=[],
                name=system_limit_ie.get("Name") or "SystemLimit",
            )
            elements.append(system_limit)
            geometry = parse_visual(system_limit_ie)
            if geometry is not None:
                visuals.append(_element_visual(system_limit.id, ElementType.SYSTEM_LIMIT, geometry))

        # A decomposed process reuses its operator's id
        process_id = parent_operator_id or self.new_id()
        if parent_operator_id is not None:
            self.decomposition[process_id] = parent_operator_id
        logger.debug("Parsing process '%s' (depth %d)", process_id, depth)

        scope = _Scope()
        state_ids: list[str] = []
        operator_ids: list[str] = []
        contained_ids: list[str] = []
        child_process_ids: list[str] = []

        for ie in child_ies:
            suc_path = ie.get("RefBaseSystemUnitPath")
            element_type = element_type_for_class(suc_path)
            if element_type is None:
                if suc_path != PROCESS_SUC:
                    self._warn(f"InternalElement '{ie.get('Name')}' has unmapped class '{suc_path}'; skipped")
                continue
            if element_type is ElementType.SYSTEM_LIMIT:
                continue

            element = self._parse_object(ie, element_type, scope, depth)
            elements.append(element)

            geometry = parse_visual(ie)
            if geometry is not None:
                visuals.append(_element_visual(element.id, element_type, geometry))

            contained_ids.append(element.id)
            if element_type in STATE_TYPES:
                state_ids.append(element.id)
            elif element_type is ElementType.PROCESS_OPERATOR:
                operator_ids.append(element.id)
                if element.decomposed_view:
                    child_process_ids.append(element.decomposed_view)

        flows = self._parse_links(process_ie, scope, visuals)
        contained_ids.extend(flow.id for flow in flows)
        _group_tandem_flows(flows)
        elements.extend(flows)

        if system_limit is not None:
            system_limit.elements_container = contained_ids
            container = [system_limit.id] + [
                e.id for e in elements if isinstance(e, TechnicalResource)
            ]
        else:
            container = []

        process = Process(
            type="fpb:Process",
            id=process_id,
            elements_container=container,
            is_decomposed_process_operator=self.decomposition.get(process_id),
            consists_of_states=state_ids,
            consists_of_system_limit=system_limit.id if system_limit else None,
            consists_of_processes=child_process_ids,
            consists_of_process_operator=operator_ids,
            parent=self.decomposition.get(process_id),
        )
        self._entries.append(
            ProcessEntry(
                process=process,
                element_data_information=elements,
                element_visual_information=visuals,
            )
        )
        return process_id

    def _parse_object(
        self,
        ie: etree._Element,
        element_type: ElementType,
        scope: _Scope,
        depth: int,
    ) -> FpbObject:
        element_id = parse_unique_ident(ie) or self.new_id()
        if element_id in self._used_ids:
            fresh_id = self.new_id()
            self._warn(f"Duplicate uniqueIdent '{element_id}'; using '{fresh_id}'")
            element_id = fresh_id
        self._used_ids.add(element_id)

        tree_id = ie.get("ID") or element_id
        scope.element_ids[tree_id] = element_id

        for ext_if in children(ie, "ExternalInterface"):
            info = port_info(ext_if.get("RefBaseClassPath"))
            port_id = ext_if.get("ID")
            if info is None:
                continue
            port = _Port(
                owner=tree_id,
                flow_type=info.flow_type,
                direction=info.direction,
                coordinate=parse_port_coordinate(ext_if),
                waypoints=parse_waypoints(ext_if),
            )
            if port_id:
                scope.ports[port_id] = port
            # CAEX 2.15 links reference "<element ID>:<interface name>"
            if ext_if.get("Name"):
                scope.ports.setdefault(f"{tree_id}:{ext_if.get('Name')}", port)

        fields = {"type": element_type.value, "id": element_id}
        identification = parse_identification(ie)
        if identification is not None:
            fields["identification"] = identification
        fields.update(
            characteristics=parse_characteristics(ie),
            incoming=[],
            outgoing=[],
            is_assigned_to=[],
            name=ie.get("Name") or "",
        )
        element = _OBJECT_MODELS[element_type](**fields)
        scope.objects[element_id] = element

        nested = _find_by_suc(children(ie, "InternalElement"), PROCESS_SUC)
        if nested is not None:
            if isinstance(element, ProcessOperator):
                element.decomposed_view = self._parse_process(nested, element_id, depth + 1)
            else:
                self._warn(f"Nested FPD_Process under non-operator '{element_id}'; skipped")
        return element

    # -- Links --

    def _parse_links(
        self,
        process_ie: etree._Element,
        scope: _Scope,
        visuals: list[VisualInformation],
    ) -> list[Flow]:
        flows: list[Flow] = []
        for link in children(process_ie, "InternalLink"):
            side_a = scope.ports.get(link.get("RefPartnerSideA") or "")
            side_b = scope.ports.get(link.get("RefPartnerSideB") or "")
            if side_a is None or side_b is None:
                self._warn(f"InternalLink '{link.get('Name')}' references an unknown interface; skipped")
                continue

            oriented = _orient(side_a, side_b)
            if oriented is None:
                self._warn(f"InternalLink '{link.get('Name')}' does not join an out and an in port; skipped")
                continue
            source_port, target_port = oriented

            source = scope.objects[scope.element_ids[source_port.owner]]
            target = scope.objects[scope.element_ids[target_port.owner]]
            flow_type = source_port.flow_type

            flow = Flow(
                type=flow_type.value,
                id=self.new_id(),
                source_ref=source.id,
                target_ref=target.id,
            )
            if flow_type in TANDEM_FLOW_TYPES:
                flow.in_tandem_with = []
            flows.append(flow)

            waypoints = _build_waypoints(source_port, target_port)
            if waypoints:
                visuals.append(
                    VisualInformation(id=flow.id, type=flow_type.value, waypoints=waypoints, markers={})
                )

            source.outgoing.append(flow.id)
            target.incoming.append(flow.id)
            _assign(source, target, flow_type)
        return flows


def _orient(side_a: _Port, side_b: _Port) -> tuple[_Port, _Port] | None:
    """Return (source port, target port) for a link, or None if malformed."""
    # Both Usage ends share one interface class; side A is the source
    if side_a.flow_type is FlowType.USAGE and side_b.flow_type is FlowType.USAGE:
        return side_a, side_b
    if side_a.direction is PortDirection.OUT and side_b.direction is PortDirection.IN:
        return side_a, side_b
    if side_a.direction is PortDirection.IN and side_b.direction is PortDirection.OUT:
        return side_b, side_a
    return None


def _assign(source: FpbObject, target: FpbObject, flow_type: FlowType) -> None:
    """Derive isAssignedTo for one flow."""
    if flow_type is FlowType.USAGE:
        _add_unique(source.is_assigned_to, target.id)
        _add_unique(target.is_assigned_to, source.id)
        return
    if isinstance(source, State) and isinstance(target, ProcessOperator):
        _add_unique(source.is_assigned_to, target.id)
    elif isinstance(target, State) and isinstance(source, ProcessOperator):
        _add_unique(target.is_assigned_to, source.id)


def _group_tandem_flows(flows: list[Flow]) -> None:
    """Link parallel/alternative flows sharing a source and kind via inTandemWith."""
    groups: dict[tuple[str, str], list[Flow]] = defaultdict(list)
    for flow in flows:
        if flow.in_tandem_with is not None:
            groups[(flow.source_ref, flow.type)].append(flow)
    for group in groups.values():
        if len(group) <= 1:
            continue
        for flow in group:
            flow.in_tandem_with = [other.id for other in group if other is not flow]


def _build_waypoints(source_port: _Port, target_port: _Port) -> list[Waypoint]:
    """Source PortCoordinate, then source FPD_Waypoints, then target PortCoordinate."""
    waypoints: list[Waypoint] = []
    if source_port.coordinate is not None:
        waypoints.append(_docking_point(source_port.coordinate))
    for point in source_port.waypoints:
        waypoints.append(Waypoint(x=point.x, y=point.y))
    if target_port.coordinate is not None:
        waypoints.append(_docking_point(target_port.coordinate))
    return waypoints


def _docking_point(point: Point) -> Waypoint:
    return Waypoint(original=Point(x=point.x, y=point.y), x=point.x, y=point.y)


def _element_visual(
    element_id: str, element_type: ElementType, geometry: dict[str, float]
) -> VisualInformation:
    return VisualInformation(id=element_id, **geometry, type=element_type.value, markers={})


def parse_aml(
    source: str | bytes | etree._Element,
    id_generator: IdGenerator | None = None,
) -> FpbDocument:
    """Convert CAEX 3.0 XML to an FpbDocument.

    Raises:
        AmlParseError: On structural errors; see ``AmlParser.parse``.
    """
    return AmlParser(source, id_generator=id_generator).parse()
