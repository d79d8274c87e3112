"""
Command line tool for checking, converting and exporting gantt schedules.

Check if a text file looks like a schedule. Exit status 0 when it does, 1 when it doesn't.
PROMPT> python -m ganttsyntax.cli.convert_schedule detect notes.txt

Convert Mermaid Gantt text to JSON, and report circular dependencies etc.
PROMPT> python -m ganttsyntax.cli.convert_schedule parse schedule.mmd --validate --output schedule.json

Convert the JSON to Mermaid Gantt text or CSV.
PROMPT> python -m ganttsyntax.cli.convert_schedule export schedule.json --format mermaid
PROMPT> python -m ganttsyntax.cli.convert_schedule export schedule.json --format csv --output schedule.csv

Convert a CSV file to JSON.
PROMPT> python -m ganttsyntax.cli.convert_schedule import-csv schedule.csv

Use '-' as the input path to read from stdin.
"""
import argparse
import logging
import sys
from typing import Optional, Sequence
from ganttsyntax.detect.schedule_detector import extract_preview, is_likely_schedule
from ganttsyntax.mermaid.export_mermaid_gantt import ExportMermaidGantt
from ganttsyntax.mermaid.parse_mermaid_gantt import parse_mermaid_gantt, validate_gantt_data
from ganttsyntax.model.serialize import export_to_json, import_from_json
from ganttsyntax.spreadsheet.export_gantt_csv import ExportGanttCSV
from ganttsyntax.spreadsheet.import_gantt_csv import ImportGanttCSV
from ganttsyntax.utils.date_utils import get_date_range
from ganttsyntax.utils.ganttsyntax_config import GanttSyntaxConfig, GanttSyntaxConfigError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2

def read_input(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()

def write_output(text: str, output_path: Optional[str]) -> None:
    if output_path is None:
        sys.stdout.write(text)
        if not text.endswith('\n'):
            sys.stdout.write('\n')
        return
    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        f.write(text)
    logger.info(f"Wrote {output_path}")

def command_detect(args: argparse.Namespace, config: GanttSyntaxConfig) -> int:
    text = read_input(args.input_path)
    preview = extract_preview(text)
    write_output(preview.model_dump_json(indent=2), args.output)
    if is_likely_schedule(text, threshold=config.schedule_threshold):
        return EXIT_OK
    logger.info(f"Doesn't look like a schedule (threshold {config.schedule_threshold})")
    return EXIT_REJECTED

def command_parse(args: argparse.Namespace, config: GanttSyntaxConfig) -> int:
    document = parse_mermaid_gantt(read_input(args.input_path))
    if document.tasks:
        start, end = get_date_range(document.tasks)
        logger.info(f"Parsed {len(document.tasks)} tasks in {len(document.sections)} sections, from {start} to {end}")
    else:
        logger.warning("No tasks found")
    write_output(export_to_json(document), args.output)

    if not args.validate:
        return EXIT_OK
    errors = validate_gantt_data(document)
    for error in errors:
        print(error, file=sys.stderr)
    return EXIT_REJECTED if errors else EXIT_OK

def command_export(args: argparse.Namespace, config: GanttSyntaxConfig) -> int:
    document = import_from_json(read_input(args.input_path))
    if args.format == 'csv':
        text = ExportGanttCSV.to_gantt_csv(
            document,
            config.date_format,
            include_bom=config.csv_include_bom,
        )
    else:
        text = ExportMermaidGantt.to_mermaid_gantt(document)
    write_output(text, args.output)
    return EXIT_OK

def command_import_csv(args: argparse.Namespace, config: GanttSyntaxConfig) -> int:
    result = ImportGanttCSV.from_csv(read_input(args.input_path), config.date_format)
    for error in result.errors:
        print(error, file=sys.stderr)
    if not result.document.tasks and result.errors:
        return EXIT_REJECTED
    write_output(export_to_json(result.document), args.output)
    return EXIT_OK

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Detect, convert and export gantt schedules (Mermaid Gantt, JSON, CSV)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    detect_parser = subparsers.add_parser('detect', help='Check if a text looks like a schedule, and preview it')
    detect_parser.add_argument('input_path', help="Text file, or '-' for stdin")
    detect_parser.add_argument('--output', '-o', help='Write the preview JSON to this file instead of stdout')
    detect_parser.set_defaults(handler=command_detect)

    parse_parser = subparsers.add_parser('parse', help='Convert Mermaid Gantt text to JSON')
    parse_parser.add_argument('input_path', help="Mermaid Gantt file, or '-' for stdin")
    parse_parser.add_argument('--validate', action='store_true', help='Report circular dependencies and inverted dates')
    parse_parser.add_argument('--output', '-o', help='Write the JSON to this file instead of stdout')
    parse_parser.set_defaults(handler=command_parse)

    export_parser = subparsers.add_parser('export', help='Convert JSON to Mermaid Gantt text or CSV')
    export_parser.add_argument('input_path', help="JSON file, or '-' for stdin")
    export_parser.add_argument('--format', choices=['mermaid', 'csv'], default='mermaid', help='Output format')
    export_parser.add_argument('--output', '-o', help='Write to this file instead of stdout')
    export_parser.set_defaults(handler=command_export)

    import_parser = subparsers.add_parser('import-csv', help='Convert CSV to JSON')
    import_parser.add_argument('input_path', help="CSV file, or '-' for stdin")
    import_parser.add_argument('--output', '-o', help='Write the JSON to this file instead of stdout')
    import_parser.set_defaults(handler=command_import_csv)

    return parser

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = GanttSyntaxConfig.load()
    except GanttSyntaxConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    try:
        return args.handler(args, config)
    except (OSError, ValueError) as e:
        # ValueError covers json.JSONDecodeError and pydantic.ValidationError.
        logger.error(f"{args.command} failed: {e}")
        return EXIT_ERROR

if __name__ == "__main__":
    sys.exit(main())
