"""Command-line interface converting files between FPB.JS JSON and AutomationML."""

import argparse
import json
import logging
import sys
from pathlib import Path

from config import settings
from export.aml_exporter import AmlExportError, export_aml
from models.process_model import FpbDocument
from parser.aml_parser import AmlParseError, AmlParser

logger = logging.getLogger(__name__)


def _to_aml(content: str) -> str:
    document = FpbDocument.from_json(json.loads(content))
    return export_aml(document)


def _to_json(content: str) -> str:
    parser = AmlParser(content)
    document = parser.parse()
    for warning in parser.warnings:
        logger.debug("Recovered: %s", warning)
    return json.dumps(document.to_json(), indent=4)


_COMMANDS = {
    "to-aml": _to_aml,
    "to-json": _to_json,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="fpb-aml",
        description="Convert FPB.JS JSON to AutomationML (CAEX 3.0) and back",
    )
    parser.add_argument("command", choices=sorted(_COMMANDS), help="Conversion direction")
    parser.add_argument("input", help="Input file (.json for to-aml, .aml for to-json)")
    parser.add_argument("output", nargs="?", help="Output file; stdout if omitted")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        content = Path(args.input).read_text(encoding="utf-8")
        result = _COMMANDS[args.command](content)
    except (OSError, ValueError, AmlExportError, AmlParseError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_text(result, encoding="utf-8")
        print(f"Written to {args.output}")
    else:
        sys.stdout.write(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
