#!/usr/bin/env python3
"""Walk a questionnaire definition end-to-end with scripted or random answers.

Loads a FHIR Questionnaire (YAML or JSON), drives a QuestionnaireSession
through it, and prints every step that was shown, every step that was
skipped, and the resulting QuestionnaireResponse JSON.

By default answers are **randomised** so each run explores a different path
through the enableWhen conditions.  Use ``--no-random`` for deterministic
answers (first option, ``True``, midpoint values).

Usage::

    # Default run (questionnaires/smoking_history.yaml, random answers)
    python scripts/walk_questionnaire.py

    # Another definition, fixed answers
    python scripts/walk_questionnaire.py path/to/questionnaire.yaml --no-random

    # Force specific answers (JSON object keyed by linkId)
    python scripts/walk_questionnaire.py --answers '{"smokes": true}'

    # Verbose mode (SDK debug logging)
    python scripts/walk_questionnaire.py -v
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

_SCRIPT_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _SCRIPT_DIR.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from c3pro_questionnaire.models import AnswerFormat, Step  # noqa: E402
from c3pro_questionnaire.questionnaire import load_questionnaire, read_definition  # noqa: E402
from c3pro_questionnaire.session import QuestionnaireSession  # noqa: E402

_DEFAULT_DEFINITION = _REPO_ROOT / "questionnaires" / "smoking_history.yaml"

# Pool of free-text answers for random mode.
_RANDOM_TEXT_POOL = [
    "none",
    "a little",
    "for about two weeks",
    "not sure",
]


# ---------------------------------------------------------------------------
# Mock answer generation
# ---------------------------------------------------------------------------


def _choice_codes(definition: dict) -> dict[str, list[str]]:
    """Map linkId → option codes for choice items, walking nested groups."""
    codes: dict[str, list[str]] = {}

    def walk(items):
        for item in items or []:
            options = item.get("answerOption") or []
            found = [
                (opt.get("valueCoding") or {}).get("code") or opt.get("valueString")
                for opt in options
            ]
            if found:
                codes[item["linkId"]] = [c for c in found if c]
            walk(item.get("item"))

    walk(definition.get("item"))
    return codes


def mock_answer(step: Step, codes: dict[str, list[str]], use_random: bool) -> Any:
    """Pick an answer for *step* based on its answer format."""
    fmt = step.answer_format
    options = codes.get(step.identifier) or ["option-1", "option-2"]

    if fmt is None:
        return None
    if fmt == AnswerFormat.BOOLEAN:
        return random.choice([True, False]) if use_random else True
    if fmt == AnswerFormat.SINGLE_CHOICE:
        return random.choice(options) if use_random else options[0]
    if fmt == AnswerFormat.MULTIPLE_CHOICE:
        if use_random:
            return random.sample(options, random.randint(1, len(options)))
        return [options[0]]
    if fmt == AnswerFormat.INTEGER:
        return random.randint(0, 40) if use_random else 20
    if fmt == AnswerFormat.TEXT:
        return random.choice(_RANDOM_TEXT_POOL) if use_random else "none"
    if fmt == AnswerFormat.DATE:
        return int(datetime(2020, 1, 15, tzinfo=timezone.utc).timestamp() * 1000)
    return None


# ---------------------------------------------------------------------------
# Main walk
# ---------------------------------------------------------------------------


def run_walk(path: Path, forced: dict[str, Any], use_random: bool, console: Console) -> None:
    """Drive a session through the definition at *path* and print the trail."""
    definition = read_definition(path)
    sequence = load_questionnaire(path)
    codes = _choice_codes(definition)
    session = QuestionnaireSession(sequence, session_id="walk")

    console.rule(f"[bold]{sequence.identifier}[/] ({len(sequence)} steps)")

    table = Table(show_lines=False)
    table.add_column("#", style="dim", width=4)
    table.add_column("Step", min_width=20)
    table.add_column("Format", width=16)
    table.add_column("Answer", min_width=20)

    shown: set[str] = set()
    step = session.start()
    while step is not None:
        shown.add(step.identifier)
        if step.identifier in forced:
            answer = forced[step.identifier]
        else:
            answer = mock_answer(step, codes, use_random)
        position, _ = session.progress()
        fmt = step.answer_format.value if step.answer_format else "display"
        table.add_row(str(position), step.identifier, fmt, "" if answer is None else repr(answer))
        step = session.submit(answer)

    console.print(table)

    skipped = [s.identifier for s in sequence if s.identifier not in shown]
    if skipped:
        console.print(f"[yellow]Skipped:[/] {', '.join(skipped)}")
    else:
        console.print("[green]No steps skipped[/]")

    document = session.build_response()
    console.rule("QuestionnaireResponse")
    console.print_json(json.dumps(document.to_fhir()))


def main() -> None:
    parser = argparse.ArgumentParser(description="Walk a questionnaire definition")
    parser.add_argument("definition", nargs="?", type=Path, default=_DEFAULT_DEFINITION)
    parser.add_argument("--no-random", action="store_true", help="deterministic answers")
    parser.add_argument("--answers", default="{}", help="JSON object of forced answers by linkId")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("-v", "--verbose", action="store_true", help="SDK debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.seed is not None:
        random.seed(args.seed)

    console = Console()
    try:
        forced = json.loads(args.answers)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid --answers JSON:[/] {exc}")
        sys.exit(2)

    run_walk(args.definition, forced, not args.no_random, console)


if __name__ == "__main__":
    main()
