"""Summarize a handful of memories from the command line.

Example:
    python -m memory_summarizer --entity pawn1 --memory "ate a meal" --memory "slept"
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from dotenv import load_dotenv

from memory_summarizer.settings import SummarizerSettings
from memory_summarizer.summarization import MemoryEntry, SummaryEngine

logger = logging.getLogger("memory_summarizer")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize memories with an LLM provider")
    parser.add_argument("--entity", required=True, help="Entity identifier")
    parser.add_argument("--label", help="Display name used in the prompt (defaults to the id)")
    parser.add_argument(
        "--memory", action="append", required=True, help="Memory text; repeat for each memory"
    )
    parser.add_argument("--template", default="default", help="Prompt template name")
    parser.add_argument("--timeout", type=float, default=200.0, help="Seconds to wait for a summary")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    engine = SummaryEngine(settings=SummarizerSettings.from_env())
    memories = [MemoryEntry(content=text, id=f"m{i}") for i, text in enumerate(args.memory, start=1)]

    try:
        # Registered before summarize so a result that lands immediately is still delivered.
        results: list[str] = []
        engine.register_callback(engine.fingerprint(args.entity, memories), results.append)

        summary = engine.summarize(args.entity, memories, args.template, entity_label=args.label)
        if summary is None and not engine.is_available():
            # Player2 local detection may still be running; give it one chance.
            time.sleep(3)
            summary = engine.summarize(args.entity, memories, args.template, entity_label=args.label)
            if summary is None and not engine.is_available():
                logger.error("Summarizer is not configured")
                return 1

        if summary is None:
            deadline = time.monotonic() + args.timeout
            while not results and time.monotonic() < deadline:
                engine.pump()
                if not results and engine.join(timeout=0.1) and engine.pending_deliveries == 0:
                    break
            summary = results[0] if results else None

        if summary is None:
            logger.error("No summary received")
            return 1
        print(summary)
        return 0
    finally:
        engine.shutdown()


if __name__ == "__main__":
    sys.exit(main())
