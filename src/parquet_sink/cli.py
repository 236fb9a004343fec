import argparse
import json
import os
import sys
from typing import Any, Dict, Iterator, List, Optional

from parquet_sink.execution.config_executor import ConfigExecutor
from parquet_sink.sinks.parquet_writer import LocalParquetWriter
from parquet_sink.utils.exceptions import SinkError


class C:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    BLUE = "\033[34m"


def cprint(text: str, color: str = C.RESET, bold: bool = False):
    prefix = (C.BOLD if bold else "") + color
    print(f"{prefix}{text}{C.RESET}")


def _write_json(path: str, payload: Dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _parse_arguments(pairs: List[str]) -> Dict[str, str]:
    arguments = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Runtime argument must be key=value, got: {pair}")
        arguments[key] = value
    return arguments


def _read_records(path: str) -> Iterator[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{line_no}: invalid JSON record: {e}") from e
            yield record


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Snapshot Parquet sink CLI")

    parser.add_argument("--config", required=True, help="Path to YAML sink config")
    parser.add_argument(
        "--arg",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Runtime argument used to resolve ${macros} (repeatable)",
    )
    parser.add_argument("--records", help="JSONL file of input records to transform and write")
    parser.add_argument("--output-file", help="Parquet output path (default: <output-dir>/<name>.parquet)")
    parser.add_argument("--output-dir", default="artifacts")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        cprint("\n[START] Sink configuration started", C.BLUE, bold=True)

        executor = ConfigExecutor(args.config, arguments=_parse_arguments(args.arg))
        sink = executor.build_sink()
        properties = sink.configure()

        os.makedirs(args.output_dir, exist_ok=True)
        properties_path = os.path.join(args.output_dir, "properties.json")
        _write_json(properties_path, properties)
        cprint(f"[INFO] Explore schema: {properties['exploreSchema']}", C.DIM)
        cprint(f"[DONE] Properties written to: {properties_path}", C.GREEN, bold=True)

        if args.records:
            sink.initialize()
            output_file = args.output_file or os.path.join(args.output_dir, f"{sink.config.name}.parquet")

            with LocalParquetWriter(output_file, sink.record_schema, sink.compression_codec) as writer:
                for record in _read_records(args.records):
                    writer.write(sink.transform(record))

            cprint(f"[DONE] {writer.rows_written} records written to: {output_file}", C.GREEN, bold=True)

        cprint("[COMPLETE] Sink configuration completed", C.GREEN, bold=True)
        return 0

    except (SinkError, OSError, ValueError) as e:
        cprint("\n[FAILED] Sink configuration failed.", C.RED, bold=True)
        cprint(str(e), C.RED)
        return 1


if __name__ == "__main__":
    sys.exit(main())
