"""AML exporter producing CAEX 3.0 documents from FPB.JS projects.

Each process becomes an ``FPD_Process`` InternalElement holding its
SystemLimit, one InternalElement per state/operator/resource, and one
InternalLink per flow. Flows are split into an outgoing ExternalInterface on
the source element and an incoming one on the target element:

- the outgoing port carries the first waypoint as PortCoordinate and every
  interior waypoint as FPD_Waypoint, FPD_Waypoint1, ...
- the incoming port carries the last waypoint as PortCoordinate
- ports are named per element and class: FPD_FlowOut, FPD_FlowOut1, ...

A decomposed ProcessOperator gets its child process nested inside its own
InternalElement.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone

from lxml import etree

from aml.attributes import (
    add_characteristics,
    add_identification,
    add_port_coordinate,
    add_visual,
    add_waypoint,
    numbered_name,
)
from aml.caex import (
    CAEX_SCHEMA_LOCATION,
    NSMAP,
    XSI_NAMESPACE,
    caex_tag,
    serialize,
    sub_element,
    text_element,
)
from aml.libraries import append_libraries
from aml.mappings import PROCESS_SUC, PortDirection, base_name, element_class, port_classes
from config import settings
from models.fpb_model import (
    ElementType,
    Flow,
    FpbObject,
    ProcessOperator,
    SystemLimit,
    VisualInformation,
)
from models.process_model import FpbDocument
from services.identifiers import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)

AUTOMATIONML_VERSION = "AutomationML 2.1"
HIERARCHY_VERSION = "1.0.0"


class AmlExportError(Exception):
    """Error raised when a document cannot be converted to AML."""


class _PortNamer:
    """Numbers ports per element and base class: ``base``, ``base1``, ..."""

    def __init__(self) -> None:
        self._counters: dict[tuple[str, str], int] = defaultdict(int)

    def next_name(self, element_id: str, base: str) -> str:
        count = self._counters[(element_id, base)]
        self._counters[(element_id, base)] = count + 1
        return numbered_name(base, count)


class AmlExporter:
    """Builds a CAEX tree from an FpbDocument, recursing into decompositions."""

    def __init__(
        self,
        document: FpbDocument,
        id_generator: IdGenerator | None = None,
        max_depth: int | None = None,
    ) -> None:
        self.document = document
        self.new_id = id_generator or UuidIdGenerator()
        self.max_depth = max_depth or settings.max_decomposition_depth

    def build(
        self,
        entry_point: str | None = None,
        written_at: datetime | None = None,
    ) -> etree._Element:
        """Build the ``CAEXFile`` tree.

        Args:
            entry_point: Process to export as root; defaults to the Project's
                ``entryPoint``.
            written_at: Timestamp for SourceDocumentInformation; defaults to now.

        Raises:
            AmlExportError: If the entry process does not exist or the
                decomposition is nested too deeply.
        """
        process_id = entry_point or self.document.project.entry_point
        if self.document.get_process(process_id) is None:
            raise AmlExportError(f"Entry point '{process_id}' has no process entry")

        written_at = written_at or datetime.now(timezone.utc)

        root = etree.Element(caex_tag("CAEXFile"), nsmap=NSMAP)
        root.set(f"{{{XSI_NAMESPACE}}}schemaLocation", CAEX_SCHEMA_LOCATION)
        root.set("SchemaVersion", "3.0")
        root.set("FileName", settings.caex_file_name)

        text_element(root, "SuperiorStandardVersion", AUTOMATIONML_VERSION)
        sub_element(
            root, "SourceDocumentInformation",
            OriginName=settings.origin_name,
            OriginID=settings.origin_id,
            OriginVersion=settings.origin_version,
            LastWritingDateTime=_iso_timestamp(written_at),
        )

        hierarchy = sub_element(root, "InstanceHierarchy", Name="InstanceHierarchy", ID=self.new_id())
        text_element(hierarchy, "Version", HIERARCHY_VERSION)

        self._build_process(hierarchy, process_id, depth=1)

        append_libraries(root)
        return root

    # -- Process containers --

    def _build_process(self, parent: etree._Element, process_id: str, depth: int) -> None:
        entry = self.document.get_process(process_id)
        if entry is None:
            logger.warning("Decomposed process '%s' not found; skipped", process_id)
            return
        if depth > self.max_depth:
            raise AmlExportError(
                f"Decomposition deeper than {self.max_depth} levels at process '{process_id}'"
            )
        logger.debug("Exporting process '%s' (depth %d)", process_id, depth)

        visuals = entry.visual_map()
        system_limit = entry.system_limit

        process_ie = sub_element(
            parent, "InternalElement",
            Name=(system_limit.name if system_limit else None) or "Process",
            ID=self.new_id(),
            RefBaseSystemUnitPath=PROCESS_SUC,
        )

        if system_limit is not None:
            sl_ie = sub_element(
                process_ie, "InternalElement",
                Name=system_limit.name or "SystemLimit",
                ID=self.new_id(),
                RefBaseSystemUnitPath=element_class(ElementType.SYSTEM_LIMIT),
            )
            sl_visual = visuals.get(system_limit.id)
            if sl_visual is not None:
                _add_element_visual(sl_ie, sl_visual)

        flows_by_source: dict[str, list[Flow]] = defaultdict(list)
        flows_by_target: dict[str, list[Flow]] = defaultdict(list)
        for flow in entry.flows:
            flows_by_source[flow.source_ref].append(flow)
            flows_by_target[flow.target_ref].append(flow)

        # flow id -> {direction: interface ID}, in order of first port
        port_ids: dict[str, dict[PortDirection, str]] = {}
        namer = _PortNamer()

        for obj in entry.objects:
            if isinstance(obj, SystemLimit):
                continue
            ie = self._build_object(process_ie, obj, visuals.get(obj.id))

            for flow in flows_by_source.get(obj.id, []):
                port_ids.setdefault(flow.id, {})[PortDirection.OUT] = self._add_port(
                    ie, obj.id, flow, PortDirection.OUT, visuals.get(flow.id), namer,
                )
            for flow in flows_by_target.get(obj.id, []):
                port_ids.setdefault(flow.id, {})[PortDirection.IN] = self._add_port(
                    ie, obj.id, flow, PortDirection.IN, visuals.get(flow.id), namer,
                )

            if isinstance(obj, ProcessOperator) and obj.decomposed_view:
                self._build_process(ie, obj.decomposed_view, depth + 1)

        link_index = 0
        for flow_id, ids in port_ids.items():
            if PortDirection.OUT not in ids or PortDirection.IN not in ids:
                logger.warning("Flow '%s' has only one port in process '%s'; no link written",
                               flow_id, process_id)
                continue
            sub_element(
                process_ie, "InternalLink",
                RefPartnerSideA=ids[PortDirection.OUT],
                RefPartnerSideB=ids[PortDirection.IN],
                Name=numbered_name("Link", link_index),
            )
            link_index += 1

    # -- Elements and ports --

    def _build_object(
        self,
        parent: etree._Element,
        obj: FpbObject,
        visual: VisualInformation | None,
    ) -> etree._Element:
        element_type = ElementType(obj.type)
        ie = sub_element(
            parent, "InternalElement",
            Name=obj.name or element_type.value.split(":", 1)[1],
            ID=self.new_id(),
            RefBaseSystemUnitPath=element_class(element_type),
        )
        if obj.identification is not None:
            add_identification(ie, obj.identification)
        add_characteristics(ie, obj.characteristics)
        if visual is not None:
            _add_element_visual(ie, visual)
        return ie

    def _add_port(
        self,
        ie: etree._Element,
        element_id: str,
        flow: Flow,
        direction: PortDirection,
        visual: VisualInformation | None,
        namer: _PortNamer,
    ) -> str:
        """Add one ExternalInterface for a flow endpoint and return its ID."""
        classes = port_classes(flow.type)
        class_path = classes.out if direction is PortDirection.OUT else classes.in_
        port_id = self.new_id()
        ext_if = sub_element(
            ie, "ExternalInterface",
            Name=namer.next_name(element_id, base_name(class_path)),
            ID=port_id,
            RefBaseClassPath=class_path,
        )

        waypoints = visual.waypoints if visual is not None else None
        if not waypoints:
            add_port_coordinate(ext_if, None, None)
            return port_id

        if direction is PortDirection.IN:
            anchor = waypoints[-1]
            point = anchor.original if anchor.original is not None else anchor
            add_port_coordinate(ext_if, point.x, point.y)
            return port_id

        anchor = waypoints[0]
        point = anchor.original if anchor.original is not None else anchor
        add_port_coordinate(ext_if, point.x, point.y)

        index = 0
        for waypoint in waypoints[1:-1]:
            # Docking points are re-derived from the port coordinates
            if waypoint.original is not None:
                continue
            add_waypoint(ext_if, index, waypoint.x, waypoint.y)
            index += 1
        return port_id


def _add_element_visual(ie: etree._Element, visual: VisualInformation) -> None:
    add_visual(ie, visual.x, visual.y, visual.width, visual.height)


def _iso_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def export_aml(
    document: FpbDocument,
    id_generator: IdGenerator | None = None,
    entry_point: str | None = None,
) -> str:
    """Convert an FpbDocument to CAEX 3.0 XML text.

    Args:
        document: The FPB.JS project to export.
        id_generator: Source of element/interface IDs; random UUIDs by default.
        entry_point: Process to export as root instead of the Project's.

    Returns:
        A string containing the AutomationML document with FPD libraries.
    """
    root = AmlExporter(document, id_generator=id_generator).build(entry_point=entry_point)
    return serialize(root)
