"""CLI entrypoint for linking a screenshot URL to a parsed question."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from quiz_bank.config import AppConfig  # noqa: E402
from quiz_bank.errors import QuestionNotFoundError  # noqa: E402
from quiz_bank.pipeline import QuizBankPipeline  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register a screenshot in the image library.")
    parser.add_argument(
        "--config",
        type=str,
        default=str(PROJECT_ROOT / "config.yaml"),
        help="Path to YAML config.",
    )
    parser.add_argument("--url", required=True, help="Screenshot URL.")
    parser.add_argument("--question-id", required=True, help="Question ID the screenshot belongs to.")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    pipeline = QuizBankPipeline(AppConfig.from_yaml(args.config))
    try:
        pipeline.register_image(args.url, args.question_id)
    except QuestionNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    for entry in pipeline.images.entries():
        if args.question_id in entry.associated_question_ids:
            print(f"{entry.image_id}: {', '.join(entry.associated_question_ids)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
