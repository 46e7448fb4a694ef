"""End-to-end demo: load transcript -> parse -> register images -> review -> rollup."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from quiz_bank.config import AppConfig  # noqa: E402
from quiz_bank.pipeline import QuizBankPipeline  # noqa: E402

DEMO_TRANSCRIPT = "\n".join(
    [
        "Lois — 3/1/2024",
        "Day 1 Question #1 What are the 4 main banking transactions?",
        "https://drive.google.com/file/d/1AbCdEfGhIjK/view",
        "Day 2 Question #1: For the attached, the vendor list is shown, how do you merge duplicate vendors?",
        "Tye_Admin — 3/2/2024",
        "Day 2 Question #1 Which formula sums a column in Excel Question #2 Describe the month end checklist",
        "Day 3 Question #1 Tell me about your favourite colour (edited)",
    ]
)


def main() -> None:
    config = AppConfig.from_dict(
        {
            "storage": {"backend": "memory"},
            "action_log": {"actor": "demo@example.com"},
        },
        base_dir=PROJECT_ROOT,
    )
    pipeline = QuizBankPipeline(config)
    pipeline.setup()

    pipeline.load_raw_data(DEMO_TRANSCRIPT)
    result = pipeline.parse_raw_data()
    print("== Parse ==")
    print(result.summary())
    for question in result.questions:
        print(f"{question.id}  {question.topic_emoji} {question.topic:<12} {question.type_emoji} {question.text}")

    print("\n== Re-parse (duplicates dropped) ==")
    print(pipeline.parse_raw_data().summary())

    print("\n== Image Library ==")
    for entry in pipeline.images.entries():
        print(f"{entry.image_id} {entry.file_identity} -> {', '.join(entry.associated_question_ids)}")

    print("\n== Pending Review ==")
    for question in pipeline.pending_questions():
        print(f"{question.id} {question.text}")
        pipeline.override_topic(question.id, "TGB Internal")

    print("\n== Admin Log Dashboard ==")
    for row in pipeline.store.read_all("Admin Log")[:4]:
        print(row[0])


if __name__ == "__main__":
    main()
