"""Main entry point for the form-designer CLI."""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from form_designer import __version__
from form_designer.config import settings
from form_designer.kernel.designer import Designer
from form_designer.kernel.models import FormConfigError
from form_designer.kernel.reducer import column_count, get_component, is_column_container, iter_tree
from form_designer.kernel.validation import check_integrity, find_dangling, validate_required


def print_help():
    """Print help message."""
    print(f"""
form-designer v{__version__}

Usage:
  form-designer <command> FILE [options]

Commands:
  tree FILE                       Print the component outline
  check FILE                      Check ordering, cycles and required fields
  eval FILE --set ID=VALUE ...    Apply runtime values and print rule results

Options:
  --set ID=VALUE    Runtime value (repeatable; eval and check)
  -h, --help        Show this help
  -v, --version     Show version

Environment:
  FORM_DESIGNER_LOG_LEVEL         Logging level (default WARNING)
  FORM_DESIGNER_RULE_MAX_PASSES   Evaluation passes per value change (default 1)
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None (tree, check, eval)
        file: str | None
        values: list[tuple[str, str]]
        show_help: bool
        show_version: bool
    """
    result = {
        "command": None,
        "file": None,
        "values": [],
        "show_help": False,
        "show_version": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in ("tree", "check", "eval") and result["command"] is None:
            result["command"] = arg
        elif arg == "--set":
            if i + 1 < len(args) and "=" in args[i + 1]:
                key, value = args[i + 1].split("=", 1)
                result["values"].append((key, value))
                i += 1
            else:
                print("Error: --set requires ID=VALUE")
                sys.exit(1)
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'form-designer --help' for usage.")
            sys.exit(1)
        elif result["command"] is not None and result["file"] is None:
            result["file"] = arg
        else:
            print(f"Unknown command: {arg}")
            print("Run 'form-designer --help' for usage.")
            sys.exit(1)

        i += 1

    return result


def load_designer(path: str) -> Designer | None:
    """Load a form file into a designer. Prints the reason and returns None on failure."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        print(f"Error: {path} not found")
        return None
    except json.JSONDecodeError as e:
        print(f"Error: {path} is not valid JSON: {e}")
        return None

    designer = Designer()
    try:
        designer.load_document(data)
    except FormConfigError as e:
        print(f"Error: {path} is not a valid form config:\n{e}")
        return None
    return designer


def render_tree(designer: Designer) -> list[str]:
    """Outline lines, root-down, columns shown as [n] markers."""
    lines: list[str] = []
    doc = designer.document
    for node, depth in iter_tree(doc):
        indent = "  " * depth
        parent = get_component(doc, node.get("parent_id"))
        column = f"[{node['column_index']}] " if is_column_container(parent) else ""
        suffix = f" ({column_count(node)} columns)" if is_column_container(node) else ""
        title = node["label"] or node["type"]
        lines.append(f"{indent}{column}{node['order']}. {title} <{node['type']}> {node['id']}{suffix}")
    return lines


def apply_values(designer: Designer, values: list[tuple[str, str]]) -> None:
    designer.enter_preview()
    for component_id, value in values:
        designer.set_value(component_id, value)


def cmd_tree(designer: Designer) -> int:
    lines = render_tree(designer)
    if not lines:
        print("(empty form)")
    for line in lines:
        print(line)
    return 0


def cmd_check(designer: Designer, values: list[tuple[str, str]]) -> int:
    apply_values(designer, values)
    errors = check_integrity(designer.document) + validate_required(designer.document, designer.logic)
    for note in find_dangling(designer.document):
        print(f"  note: {note}")
    for error in errors:
        print(f"  error: {error}")
    if errors:
        print(f"{len(errors)} problem(s)")
        return 1
    print("OK")
    return 0


def cmd_eval(designer: Designer, values: list[tuple[str, str]]) -> int:
    apply_values(designer, values)
    for node, depth in iter_tree(designer.document):
        props = designer.get_computed_props(node["id"])
        value = designer.get_value(node["id"])
        extra = f"  {json.dumps(props, ensure_ascii=False)}" if props else ""
        print(f"{'  ' * depth}{node['id']} = {json.dumps(value, ensure_ascii=False)}{extra}")
    print(f"generation {designer.generation}")
    return 0


def main():
    """Main entry point."""
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(sys.argv[1:])

    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"form-designer {__version__}")
        return

    if args["command"] is None or args["file"] is None:
        print_help()
        sys.exit(1)

    designer = load_designer(args["file"])
    if designer is None:
        sys.exit(1)

    if args["command"] == "tree":
        sys.exit(cmd_tree(designer))
    elif args["command"] == "check":
        sys.exit(cmd_check(designer, args["values"]))
    else:
        sys.exit(cmd_eval(designer, args["values"]))


if __name__ == "__main__":
    main()
