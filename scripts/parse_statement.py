#!/usr/bin/env python3
"""Run one revenue statement PDF through the pipeline and print the result."""
import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from revenue_parser.config import load_config
from revenue_parser.derived.calculator import DerivedFieldCalculator
from revenue_parser.exceptions import RevenueParserError
from revenue_parser.export import cdex
from revenue_parser.export.excel import ExcelExporter
from revenue_parser.llm.client import VisionExtractionClient
from revenue_parser.pipeline import RevenueStatementPipeline


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("pdf", type=Path, help="Revenue statement PDF")
    parser.add_argument("--out", type=Path, help="Directory for Excel and CDEX exports")
    parser.add_argument("--seed", type=int, help="Seed for owner interest jitter")
    args = parser.parse_args()

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        pipeline = RevenueStatementPipeline(
            client=VisionExtractionClient(config.openai),
            config=config,
        )
        result = pipeline.run(
            args.pdf.read_bytes(),
            args.pdf.name,
            on_progress=lambda p: print(f"  {p:5.1f}%", file=sys.stderr),
        )
    except RevenueParserError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(e.user_message, file=sys.stderr)
        return 1

    print(json.dumps(result.record.to_dict(), indent=2))
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    if args.out:
        args.out.mkdir(parents=True, exist_ok=True)
        exporter = ExcelExporter(calculator=DerivedFieldCalculator(seed=args.seed))
        excel_path = exporter.export(result.record, args.out / exporter.build_filename(args.pdf.name))
        print(f"Excel: {excel_path}", file=sys.stderr)

        errors = cdex.validate_cdex_data(result.record)
        if errors:
            print("CDEX skipped:\n  " + "\n  ".join(errors), file=sys.stderr)
        else:
            xml_path = args.out / cdex.build_filename(args.pdf.name)
            cdex.export_cdex(result.record, args.pdf.name, file_path=xml_path)
            print(f"CDEX: {xml_path}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
