"""Shared FPB.JS sample documents."""

import copy

import pytest


def _ident(uid: str, name: str) -> dict:
    return {
        "$type": "fpb:Identification",
        "uniqueIdent": uid,
        "longName": name,
        "shortName": uid.upper(),
        "versionNumber": "1",
        "revisionNumber": "0",
    }


def _obj(type_: str, uid: str, name: str, incoming=(), outgoing=(), **extra) -> dict:
    record = {
        "$type": type_,
        "id": uid,
        "name": name,
        "identification": _ident(uid, name),
        "characteristics": [],
        "incoming": list(incoming),
        "outgoing": list(outgoing),
        "isAssignedTo": [],
    }
    record.update(extra)
    return record


def _box(uid: str, type_: str, x: float, y: float, w: float = 50, h: float = 50) -> dict:
    return {"id": uid, "type": type_, "x": x, "y": y, "width": w, "height": h, "markers": {}}


# Root process: p1, e1 -> po1 -> p2 | p3 (alternative), po1 <-> tr1 (usage).
# po1 is decomposed into a child process: p4 -> po2.
MANUFACTURING = [
    {
        "$type": "fpb:Project",
        "name": "Manufacturing",
        "targetNamespace": "http://www.hsu-ifa.de/fpbjs",
        "entryPoint": "proc_root",
    },
    {
        "process": {
            "$type": "fpb:Process",
            "id": "proc_root",
            "elementsContainer": ["sl1", "tr1"],
            "isDecomposedProcessOperator": None,
            "consistsOfStates": ["p1", "e1", "p2", "p3"],
            "consistsOfSystemLimit": "sl1",
            "consistsOfProcesses": ["proc_child"],
            "consistsOfProcessOperator": ["po1"],
            "parent": None,
        },
        "elementDataInformation": [
            {
                "$type": "fpb:SystemLimit",
                "id": "sl1",
                "name": "Manufacturing",
                "elementsContainer": [
                    "p1", "e1", "po1", "p2", "p3", "tr1", "f1", "f2", "f3", "f4", "f5",
                ],
            },
            _obj(
                "fpb:Product", "p1", "Raw Material", outgoing=["f1"],
                characteristics=[
                    {
                        "identification": {"uniqueIdent": "c1", "longName": "Mass"},
                        "descriptiveElement": {"setpointValue": "12", "actualValues": "11.5"},
                        "relationalElement": {"view": "physical", "model": "SI"},
                    },
                    {"descriptiveElement": {"representivity": "high"}},
                ],
            ),
            _obj("fpb:Energy", "e1", "Electricity", outgoing=["f2"]),
            _obj(
                "fpb:ProcessOperator", "po1", "Machining",
                incoming=["f1", "f2"], outgoing=["f3", "f4", "f5"],
                decomposedView="proc_child",
            ),
            _obj("fpb:Product", "p2", "Part", incoming=["f3"]),
            _obj("fpb:Product", "p3", "Scrap", incoming=["f4"]),
            _obj("fpb:TechnicalResource", "tr1", "Lathe", incoming=["f5"]),
            {"$type": "fpb:Flow", "id": "f1", "sourceRef": "p1", "targetRef": "po1"},
            {"$type": "fpb:Flow", "id": "f2", "sourceRef": "e1", "targetRef": "po1"},
            {
                "$type": "fpb:AlternativeFlow", "id": "f3",
                "sourceRef": "po1", "targetRef": "p2", "inTandemWith": ["f4"],
            },
            {
                "$type": "fpb:AlternativeFlow", "id": "f4",
                "sourceRef": "po1", "targetRef": "p3", "inTandemWith": ["f3"],
            },
            {"$type": "fpb:Usage", "id": "f5", "sourceRef": "po1", "targetRef": "tr1"},
        ],
        "elementVisualInformation": [
            _box("sl1", "fpb:SystemLimit", 0, 0, 600, 400),
            _box("p1", "fpb:Product", 100, 20),
            _box("e1", "fpb:Energy", 200, 20),
            _box("po1", "fpb:ProcessOperator", 150, 150, 150, 80),
            _box("p2", "fpb:Product", 100, 320),
            _box("p3", "fpb:Product", 250, 320),
            _box("tr1", "fpb:TechnicalResource", 450, 150, 150, 80),
            {
                "id": "f1",
                "type": "fpb:Flow",
                "waypoints": [
                    {"original": {"x": 125, "y": 70}, "x": 125, "y": 72},
                    {"x": 125, "y": 110},
                    {"x": 180.5, "y": 110},
                    {"original": {"x": 180.5, "y": 150}, "x": 180.5, "y": 148},
                ],
                "markers": {},
            },
            {
                "id": "f3",
                "type": "fpb:AlternativeFlow",
                "waypoints": [{"x": 200, "y": 230}, {"x": 125, "y": 320}],
                "markers": {},
            },
        ],
    },
    {
        "process": {
            "$type": "fpb:Process",
            "id": "proc_child",
            "elementsContainer": ["sl2"],
            "isDecomposedProcessOperator": "po1",
            "consistsOfStates": ["p4"],
            "consistsOfSystemLimit": "sl2",
            "consistsOfProcesses": [],
            "consistsOfProcessOperator": ["po2"],
            "parent": "proc_root",
        },
        "elementDataInformation": [
            {"$type": "fpb:SystemLimit", "id": "sl2", "name": "Turning Cell", "elementsContainer": ["p4", "po2", "f6"]},
            _obj("fpb:Product", "p4", "Blank", outgoing=["f6"]),
            _obj("fpb:ProcessOperator", "po2", "Turning", incoming=["f6"]),
            {"$type": "fpb:Flow", "id": "f6", "sourceRef": "p4", "targetRef": "po2"},
        ],
        "elementVisualInformation": [],
    },
]


@pytest.fixture
def manufacturing_json() -> list[dict]:
    """A two-level FPB.JS project covering every flow kind."""
    return copy.deepcopy(MANUFACTURING)
