"""Command-line entry point.

    python main.py analyze contract.pdf --role tenant
    python main.py simulate contract.pdf --scenario "I move out two months early"
"""
from __future__ import annotations
import argparse
import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path
from unbind.ingest.pdf_loader import extract_text
from unbind.pipeline import ContractAnalyzer
from unbind.report.json_export import build_analysis_json
from unbind.utils.config import AppConfig
from unbind.utils.exception import CustomException
from unbind.utils.logger import logger


def load_document(path: str) -> str:
    p = Path(path)
    if p.suffix.lower() == ".pdf":
        return extract_text(p)
    return p.read_text(encoding="utf-8")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Analyze a contract or simulate a scenario against it.")
    sub = parser.add_subparsers(dest="command", required=True)
    p_analyze = sub.add_parser("analyze")
    p_analyze.add_argument("file")
    p_analyze.add_argument("--role", required=True, help="e.g. tenant, employee, contractor")
    p_sim = sub.add_parser("simulate")
    p_sim.add_argument("file")
    p_sim.add_argument("--scenario", required=True)
    args = parser.parse_args(argv)

    config = AppConfig.from_env()
    try:
        analyzer = ContractAnalyzer(config)
        text = load_document(args.file)
        if args.command == "analyze":
            result = asyncio.run(analyzer.analyze_contract(text, args.role, on_progress=logger.info))
            meta = {
                "file": Path(args.file).name,
                "role": args.role,
                "model": config.chat_model,
                "generatedAt": datetime.now(timezone.utc).isoformat(),
            }
            print(build_analysis_json(result, meta))
        else:
            print(asyncio.run(analyzer.simulate_impact(text, args.scenario)))
    except CustomException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        # missing API key or out-of-range settings
        logger.error("Configuration error: %s", e)
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
