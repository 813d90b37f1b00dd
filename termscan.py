#!/usr/bin/env python3

import argparse
import json
import logging
import sys
import time
from collections import Counter
from typing import Dict, List

from glossmatch import TermMatcher, __version__, load_index


def raw_count(progress_data: Dict) -> int:
    """Raw hit count as reported by the filtering stage."""
    for stage_info in progress_data.get("stages", []):
        if stage_info["stage"] == "filtering":
            return stage_info["total"]
    return 0


def show_match_statistics(
    progress_data: Dict, raw_matches: int, output_matches: int, term_counts: Counter = None
):
    """Display detailed matching statistics."""
    total_time = time.time() - progress_data["start_time"]
    stages = progress_data.get("stages", [])

    sys.stderr.write("=== Match Statistics ===\n")
    sys.stderr.write(f"Total processing time: {total_time:.2f} seconds\n")
    sys.stderr.write(f"Raw hits: {raw_matches}\n")
    sys.stderr.write(f"Final matches: {output_matches}\n")
    sys.stderr.write(
        f"Rejected: {raw_matches - output_matches} hits ({((raw_matches - output_matches) / raw_matches * 100) if raw_matches else 0:.1f}%)\n"
    )

    if term_counts:
        sys.stderr.write("\nMatches by term:\n")
        for term_id, count in term_counts.most_common():
            sys.stderr.write(f"  {term_id}: {count}\n")

    if stages:
        sys.stderr.write("\nStage breakdown:\n")
        stage_times: Dict[str, float] = {}
        prev_time = 0.0
        for stage_info in stages:
            stage = stage_info["stage"]
            timestamp = stage_info["timestamp"]
            stage_times[stage] = stage_times.get(stage, 0.0) + (timestamp - prev_time)
            prev_time = timestamp

        for stage, stage_time in stage_times.items():
            sys.stderr.write(f"  {stage}: {stage_time:.3f}s\n")

    sys.stderr.write("========================\n\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find glossary terms in a text file."
    )
    parser.add_argument(
        "terms_file",
        nargs="?",
        help="Path to a term bundle (JSON) or a directory of term JSON files",
    )
    parser.add_argument("text_file", nargs="?", help="Path to input text file")
    parser.add_argument(
        "--level",
        default=None,
        help="Audience level to show: premed, medschool or all (default: medschool)",
    )
    parser.add_argument(
        "--enable-experimental",
        action="store_true",
        help="Include terms marked as experimental",
    )
    parser.add_argument(
        "--pretty-print",
        action="store_true",
        help="Emit all results in a single pretty-printed JSON array",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all progress updates",
    )
    parser.add_argument(
        "--no-resolve",
        action="store_true",
        help="Skip term filtering and overlap resolution; emit raw automaton hits",
    )
    parser.add_argument(
        "--show-stats",
        action="store_true",
        help="Show detailed match statistics",
    )
    parser.add_argument(
        "--show-timing",
        action="store_true",
        help="Show detailed timing information",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write output to this file (UTF-8, LF line endings). If omitted, output goes to stdout.",
    )
    return parser


def main(argv: List[str] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"glossmatch: {__version__}")
        return 0

    if not args.terms_file or not args.text_file:
        parser.error("the following arguments are required: terms_file, text_file")

    overall_start_time = time.time()

    logging.basicConfig(
        level=getattr(logging, args.log_level), format="[%(levelname)s] %(message)s"
    )
    logger = logging.getLogger("termscan")

    load_start = time.time()
    try:
        index = load_index(args.terms_file)
    except RuntimeError as e:
        logger.error("%s", e)
        return 1

    with open(args.text_file, "r", encoding="utf-8") as f:
        text = f.read()
    load_time = time.time() - load_start

    if args.show_timing:
        sys.stderr.write(f"Index and text loading time: {load_time:.3f}s\n")

    matcher = TermMatcher(index)
    if args.level:
        matcher.set_user_level(args.level)
    matcher.set_feature_flag(args.enable_experimental)

    build_start = time.time()
    matcher.initialize()
    if args.show_timing:
        sys.stderr.write(f"Automaton build time: {time.time() - build_start:.3f}s\n")

    output = []

    if args.no_resolve:
        raw_hits = matcher.automaton.search(text)
        for hit in raw_hits:
            item = hit.to_dict()
            item["match"] = text[hit.start : hit.end]
            output.append(item)

        sys.stderr.write(f"Found {len(output)} raw hits\n")
        if args.show_stats:
            show_match_statistics(
                {"stages": [], "start_time": overall_start_time},
                len(raw_hits),
                len(output),
            )
    else:
        start_time = time.time()
        progress_data = {"stages": [], "start_time": start_time}

        def progress_callback(stage: str, current: int, total: int):
            """Progress callback for TermMatcher."""
            if not args.quiet:
                pct = (current / total * 100) if total else 0
                sys.stderr.write(f"\rMatching: {stage}: {current}/{total} ({pct:.1f}%)")
                sys.stderr.flush()

            progress_data["stages"].append(
                {
                    "stage": stage,
                    "current": current,
                    "total": total,
                    "timestamp": time.time() - start_time,
                }
            )

        matches = matcher.find_terms(text, progress_callback=progress_callback)

        if not args.quiet:
            sys.stderr.write("\n")

        if args.show_timing:
            sys.stderr.write(f"Matching time: {time.time() - start_time:.3f}s\n")

        term_counts: Counter = Counter()
        for m in matches:
            item = m.to_dict()
            item["match"] = text[m.start : m.end]
            output.append(item)
            term_counts.update(m.term_ids)

        if args.show_stats:
            show_match_statistics(
                progress_data, raw_count(progress_data), len(output), term_counts
            )

        sys.stderr.write(f"Found {len(output)} term matches\n")

    if args.show_timing:
        overall_time = time.time() - overall_start_time
        sys.stderr.write(f"Overall processing time: {overall_time:.3f} seconds\n")

    if args.output:
        output_stream = open(args.output, "w", encoding="utf-8", newline="\n")
    else:
        output_stream = sys.stdout

    try:
        if args.pretty_print:
            json.dump(output, output_stream, indent=2, ensure_ascii=False)
            output_stream.write("\n")
        else:
            for item in output:
                output_stream.write(json.dumps(item, ensure_ascii=False))
                output_stream.write("\n")
    finally:
        if output_stream is not sys.stdout:
            output_stream.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
