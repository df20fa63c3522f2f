#!/usr/bin/env python3
"""
Pattern Responder - Main Entry Point
====================================

Command-line interface for the trained-response pattern matcher.

Usage:
    python main.py --ask "How do I apply?"   # Answer a question
    python main.py --rank "How do I apply?"  # Show top-scoring patterns
    python main.py --web                     # Start web API
    python main.py --list [CATEGORY]         # List patterns
    python main.py --categories              # Category statistics
    python main.py --convert SRC DEST        # Build a pattern file
    python main.py --init                    # Write default config and patterns
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, create_default_config, Config
from core.logging import setup_logging, get_logger
from core.exceptions import ResponderError

logger = get_logger("main")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Pattern Responder - trained answers for free-text questions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --ask "how do i apply for asylum"
  python main.py --rank "processing time for i-485"
  python main.py --web --port 9000
  python main.py --list documents
  python main.py --convert questions.json patterns.json --merge
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--ask",
        metavar="QUESTION",
        help="Answer a question from the trained patterns"
    )
    mode_group.add_argument(
        "--rank",
        metavar="QUESTION",
        help="Show the best-scoring patterns for a question"
    )
    mode_group.add_argument(
        "--web",
        action="store_true",
        help="Start web API server"
    )
    mode_group.add_argument(
        "--list",
        nargs="?",
        const="all",
        metavar="CATEGORY",
        help="List patterns, optionally for one category"
    )
    mode_group.add_argument(
        "--categories",
        action="store_true",
        help="Show pattern counts per category"
    )
    mode_group.add_argument(
        "--convert",
        nargs=2,
        metavar=("SRC", "DEST"),
        help="Convert a question collection into a pattern file"
    )
    mode_group.add_argument(
        "--init",
        action="store_true",
        help="Write default configuration and pattern file"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--patterns",
        type=str,
        metavar="PATH",
        help="Pattern file to load (overrides configuration)"
    )
    parser.add_argument(
        "--threshold",
        type=float,
        help="Minimum combined score for a match"
    )
    parser.add_argument(
        "--merge",
        action="store_true",
        help="With --convert: keep existing patterns and add new ones"
    )
    parser.add_argument(
        "--no-backup",
        action="store_true",
        help="With --convert: do not back up the existing pattern file"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=5,
        help="Number of results for --rank (default: 5)"
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port for web API (default from config: 8080)"
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Host for web API (default from config: 127.0.0.1)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    return parser.parse_args(argv)


def build_matcher(config: Config):
    """Create a matcher for the configured pattern file."""
    from matching.engine import PatternMatcher
    from matching.store import FilePatternSource

    return PatternMatcher(
        source=FilePatternSource(config.patterns_path),
        config=config.matcher
    )


def run_ask(config: Config, question: str) -> None:
    """Answer a single question."""
    matcher = build_matcher(config)
    result = matcher.get_response(question)

    print(f"\nQuestion: {question}")
    print("-" * 50)

    if result is None:
        print("No trained response for this question.")
        return

    print(result.answer)
    print()
    print(f"  Category:    {result.category}")
    print(f"  Pattern:     {result.pattern}")
    print(f"  Match score: {result.match_score:.2f}")
    print(f"  Confidence:  {result.confidence:.2f}")
    print(f"  Sources:     {', '.join(result.sources)}")


def run_rank(config: Config, question: str, limit: int) -> None:
    """Show top-scoring patterns for a question, threshold ignored."""
    matcher = build_matcher(config)

    print(f"\nQuestion: {question}")
    print(f"Threshold: {matcher.min_threshold:.2f}")
    print("-" * 50)

    for match in matcher.rank(question, limit=limit):
        marker = "✓" if match.match_score > matcher.min_threshold else " "
        print(f"  {marker} {match.match_score:.2f}  [{match.record.category}] {match.record.pattern}")


def run_list(config: Config, category: str) -> None:
    """List stored patterns."""
    matcher = build_matcher(config)
    records = matcher.get_all_patterns()

    if category != "all":
        records = [r for r in records if r.category == category]

    print(f"\nPatterns ({len(records)})")
    print("-" * 50)
    for record in records:
        print(f"  [{record.category}] {record.pattern} (confidence {record.confidence:.2f})")


def run_categories(config: Config) -> None:
    """Show pattern counts per category."""
    from matching.catalog import category_stats

    matcher = build_matcher(config)
    stats = category_stats(matcher.get_all_patterns())

    print("\nCategory Statistics")
    print("-" * 50)
    for item in stats:
        print(f"  {item['displayName']}: {item['count']} questions")
    print(f"\n  Total Questions: {len(matcher)}")
    print(f"  Categories: {len(stats)}")


def run_convert(src: str, dest: str, merge: bool, backup: bool) -> None:
    """Build a pattern file from a question collection."""
    from matching.collection import convert_collection

    summary = convert_collection(src, dest, merge=merge, backup=backup)

    print(f"\n✓ Saved {summary['total']} training patterns to {dest}")
    print(f"  Added: {summary['added']}")
    if summary["backup"]:
        print(f"  Backup: {summary['backup']}")
    for category, count in summary["categories"].items():
        print(f"  {category}: {count}")


def run_init(config_path: Optional[str]) -> None:
    """Write default configuration and pattern file."""
    from matching.store import create_default_patterns

    config = create_default_config(config_path=config_path)
    source = create_default_patterns(config.patterns_path)
    config_file = config_path or str(Path(config.config_dir) / "config.yaml")

    print(f"✓ Configuration: {config_file}")
    print(f"✓ Patterns:      {source.path}")


def run_web_ui(config: Config, host: str, port: int, debug: bool) -> None:
    """Run the web API server."""
    from ui.web.app import run_app

    print(f"\nStarting Web API on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    run_app(host=host, port=port, debug=debug, config=config)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        if args.init:
            run_init(args.config)
            return 0

        config = load_config(args.config)

        if args.patterns:
            config.matcher.patterns_path = args.patterns
        if args.threshold is not None:
            config.matcher.min_threshold = args.threshold
        if args.debug:
            config.debug = True
        config.validate()

        setup_logging(
            log_dir=config.log_dir if args.web else None,
            log_level="DEBUG" if args.debug else ("INFO" if args.web else "WARNING"),
            console_output=True
        )

        if args.ask is not None:
            run_ask(config, args.ask)
        elif args.rank is not None:
            run_rank(config, args.rank, args.limit)
        elif args.web:
            run_web_ui(
                config,
                args.host or config.web.host,
                args.port or config.web.port,
                args.debug or config.web.debug
            )
        elif args.list is not None:
            run_list(config, args.list)
        elif args.categories:
            run_categories(config)
        elif args.convert:
            run_convert(args.convert[0], args.convert[1], args.merge, not args.no_backup)
        else:
            print("No mode specified. Use --ask, --web, --list or --help")
            print("\nQuick start:")
            print("  python main.py --init")
            print('  python main.py --ask "how do i apply"')

        return 0

    except ResponderError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
