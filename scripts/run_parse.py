"""CLI entrypoint for parsing a chat transcript into the question tables."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from quiz_bank.config import AppConfig  # noqa: E402
from quiz_bank.errors import ParseAbortedError  # noqa: E402
from quiz_bank.pipeline import QuizBankPipeline  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Parse a chat transcript into quiz questions.")
    parser.add_argument(
        "--config",
        type=str,
        default=str(PROJECT_ROOT / "config.yaml"),
        help="Path to YAML config.",
    )
    parser.add_argument(
        "--input",
        type=str,
        help="Transcript text file. Omit to parse the stored raw data table.",
    )
    parser.add_argument(
        "--load-only",
        action="store_true",
        help="Append the input to the raw data table without parsing it.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    config = AppConfig.from_yaml(args.config)
    pipeline = QuizBankPipeline(config)
    pipeline.setup()

    try:
        if args.input:
            text = Path(args.input).read_text(encoding="utf-8")
            if args.load_only:
                count = pipeline.load_raw_data(text)
                print(f"Loaded {count} lines into the raw data table.")
                return 0
            result = pipeline.parse(text)
        else:
            result = pipeline.parse_raw_data()
    except ParseAbortedError as exc:
        print(f"Parsing failed after {exc.emitted_count} questions: {exc}", file=sys.stderr)
        return 1

    print(f"Parsing complete! {result.emitted_count} questions processed.")
    for question in result.questions:
        flag = " (needs review)" if question.needs_review else ""
        print(f"{question.id}  {question.topic_emoji} {question.topic}  {question.text}{flag}")
    if result.duplicate_ids:
        print(f"Skipped duplicates: {', '.join(result.duplicate_ids)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
