"""Container models for a complete FPB.JS project document."""

from typing import Any, Literal, Optional

from pydantic import Field, ValidationError

from .fpb_model import (
    ElementData,
    Flow,
    FpbObject,
    FpbRecord,
    ProcessOperator,
    SystemLimit,
    VisualInformation,
)


class Project(FpbRecord):
    """Project header; ``entry_point`` names the root process."""
    type: Literal["fpb:Project"] = Field(alias="$type")
    name: Optional[str] = None
    target_namespace: Optional[str] = None
    entry_point: Optional[str] = None


class Process(FpbRecord):
    """Process record of one (possibly decomposed) process level."""
    type: Literal["fpb:Process"] = Field(alias="$type")
    id: str
    elements_container: list[str] = Field(default_factory=list)
    is_decomposed_process_operator: Optional[str] = None
    consists_of_states: list[str] = Field(default_factory=list)
    consists_of_system_limit: Optional[str] = None
    consists_of_processes: list[str] = Field(default_factory=list)
    consists_of_process_operator: list[str] = Field(default_factory=list)
    parent: Optional[str] = None


class ProcessEntry(FpbRecord):
    """One process with its element data and visual information."""
    process: Process
    element_data_information: list[ElementData] = Field(default_factory=list)
    element_visual_information: list[VisualInformation] = Field(default_factory=list)

    @property
    def objects(self) -> list[FpbObject]:
        return [e for e in self.element_data_information if isinstance(e, FpbObject)]

    @property
    def flows(self) -> list[Flow]:
        return [e for e in self.element_data_information if isinstance(e, Flow)]

    @property
    def system_limit(self) -> SystemLimit | None:
        for element in self.element_data_information:
            if isinstance(element, SystemLimit):
                return element
        return None

    def visual_map(self) -> dict[str, VisualInformation]:
        return {v.id: v for v in self.element_visual_information}


class FpbDocument(FpbRecord):
    """A whole FPB.JS export: the Project header plus every process entry."""
    project: Project
    processes: list[ProcessEntry] = Field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "FpbDocument":
        """Build a document from the FPB.JS JSON array.

        Records are recognized by shape: the ``fpb:Project`` header and every
        object holding a ``process`` key. Anything else is ignored.

        Raises:
            ValueError: If the input is not a list, has no Project header, or a
                record fails validation.
        """
        if not isinstance(data, list):
            raise ValueError("FPB.JS document must be a JSON array")

        project: Project | None = None
        processes: list[ProcessEntry] = []
        try:
            for record in data:
                if not isinstance(record, dict):
                    continue
                if record.get("$type") == "fpb:Project" and project is None:
                    project = Project.model_validate(record)
                elif "process" in record:
                    processes.append(ProcessEntry.model_validate(record))
        except ValidationError as exc:
            raise ValueError(f"Invalid FPB.JS record: {exc}") from exc

        if project is None:
            raise ValueError("No fpb:Project header found")
        return cls(project=project, processes=processes)

    def to_json(self) -> list[dict[str, Any]]:
        """Dump the document as the FPB.JS JSON array, header first."""
        return [self.project.to_json()] + [entry.to_json() for entry in self.processes]

    def get_process(self, process_id: str | None) -> ProcessEntry | None:
        for entry in self.processes:
            if entry.process.id == process_id:
                return entry
        return None

    def find_operator(self, element_id: str) -> ProcessOperator | None:
        """Find a ProcessOperator by id anywhere in the document."""
        for entry in self.processes:
            for element in entry.element_data_information:
                if isinstance(element, ProcessOperator) and element.id == element_id:
                    return element
        return None
