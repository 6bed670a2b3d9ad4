#!/usr/bin/env python3
"""
Extract plays from saved OCR text of one or more tickets.

Usage:
  python scripts/parse_ticket_text.py ticket1.txt ticket2.txt --game modified_2_step_beta
  cat ticket.txt | python scripts/parse_ticket_text.py -

Files are processed in the order given and plays repeated across tickets are
printed once. Output is JSON: {"draws": [...], "total_draws": n}.
"""
import argparse
import json
import sys
import os

from loguru import logger

# Ensure imports work when run from project root
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from src.ocr_settings import load_ocr_settings
from src.ticket_ocr import format_draws
from src.ticket_processor import TicketOCRProcessor


def read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


def main() -> int:
    parser = argparse.ArgumentParser(description="Extract lottery plays from OCR text")
    parser.add_argument("paths", nargs="+", help="Text files with OCR output ('-' for stdin)")
    parser.add_argument("--game", default=None, help="Game preset (default from config)")
    parser.add_argument("--max-groups", type=int, default=None, help="Cap on plays per ticket")
    parser.add_argument("--complete", action="store_true", help="Top up short tickets with canonical plays")
    args = parser.parse_args()

    # Text only: no OCR engine needed
    processor = TicketOCRProcessor(settings=load_ocr_settings(), ocr_engine=lambda _: "")
    overrides = {"max_groups": args.max_groups} if args.max_groups else None

    try:
        extractor = processor.build_extractor(args.game, overrides, args.complete or None)
        texts = [read_text(p) for p in args.paths]
    except (ValueError, OSError) as e:
        logger.error(str(e))
        return 1

    groups = extractor.extract_many(texts)
    print(json.dumps(format_draws(groups), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
