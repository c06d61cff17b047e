"""
flowbranch CLI: inspect workflow documents and insert branches from the command line.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from flowbranch.branching import (
    analyze_transfer,
    detect_insertion_points,
    find_cycles,
    insert_branch,
    insertion_point_to_dict,
    insertion_result_to_dict,
    step_analysis_to_dict,
    validate_edge_connections,
    validate_transfer,
)
from flowbranch.graph import WorkflowDocument, workflow_from_dict

logger = logging.getLogger("flowbranch")


def main() -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code: 0 on success, 1 on errors or rejected operations
    """
    parser = argparse.ArgumentParser(
        description="flowbranch: branch insertion for agent workflow graphs"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    points_parser = subparsers.add_parser("points", help="List branch insertion points")
    points_parser.add_argument("workflow", help="Workflow JSON file")
    points_parser.add_argument("--output", help="Output JSON file path (default: stdout)")

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze and validate a step transfer"
    )
    analyze_parser.add_argument("workflow", help="Workflow JSON file")
    analyze_parser.add_argument("--source", required=True, help="Source node id")
    analyze_parser.add_argument("--target", required=True, help="Target node id")
    analyze_parser.add_argument("--output", help="Output JSON file path (default: stdout)")

    insert_parser = subparsers.add_parser(
        "insert", help="Insert a branch between two nodes"
    )
    insert_parser.add_argument("workflow", help="Workflow JSON file")
    insert_parser.add_argument("--source", required=True, help="Source node id")
    insert_parser.add_argument("--target", required=True, help="Target node id")
    insert_parser.add_argument(
        "--layout",
        help="Layout options YAML file path (default: built-in spacing)",
    )
    insert_parser.add_argument("--output", help="Output JSON file path (default: stdout)")

    check_parser = subparsers.add_parser("check", help="Check edge integrity and cycles")
    check_parser.add_argument("workflow", help="Workflow JSON file")
    check_parser.add_argument("--output", help="Output JSON file path (default: stdout)")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        document = _load_document(args.workflow)
        if args.command == "points":
            return _run_points(document, args.output)
        if args.command == "analyze":
            return _run_analyze(document, args.source, args.target, args.output)
        if args.command == "insert":
            return _run_insert(document, args.source, args.target, args.layout, args.output)
        return _run_check(document, args.output)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _load_document(path: str) -> WorkflowDocument:
    path_obj = Path(path)
    if not path_obj.exists():
        raise FileNotFoundError(f"Path does not exist: {path}")
    return workflow_from_dict(json.loads(path_obj.read_text(encoding="utf-8")))


def _emit(payload, output: str | None) -> None:
    output_json = json.dumps(payload, indent=2, sort_keys=True)
    if output:
        Path(output).write_text(output_json, encoding="utf-8")
    else:
        print(output_json)


def _run_points(document: WorkflowDocument, output: str | None) -> int:
    points = detect_insertion_points(document.nodes, document.edges)
    _emit([insertion_point_to_dict(p) for p in points], output)
    return 0


def _run_analyze(
    document: WorkflowDocument, source: str, target: str, output: str | None
) -> int:
    analysis = analyze_transfer(source, target, document.nodes, document.edges)
    validation = validate_transfer(source, target, analysis, document.nodes, document.edges)
    payload = step_analysis_to_dict(analysis)
    payload["is_valid"] = validation.is_valid
    payload["errors"] = list(validation.errors)
    _emit(payload, output)
    return 0 if validation.is_valid else 1


def _run_insert(
    document: WorkflowDocument,
    source: str,
    target: str,
    layout: str | None,
    output: str | None,
) -> int:
    result = insert_branch(document, source, target, options=layout)
    _emit(insertion_result_to_dict(result), output)
    return 0


def _run_check(document: WorkflowDocument, output: str | None) -> int:
    report = validate_edge_connections(document.nodes, document.edges)
    cycles = find_cycles(document.nodes, document.edges)
    _emit(
        {
            "valid": report.valid,
            "errors": list(report.errors),
            "warnings": list(report.warnings),
            "cycles": [list(c) for c in cycles],
        },
        output,
    )
    for warning in report.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    return 0 if report.valid else 1


if __name__ == "__main__":
    sys.exit(main())
