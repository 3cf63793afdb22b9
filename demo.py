#!/usr/bin/env python3
"""One-shot demo: splits hardcoded sample lines and optionally a file."""

import argparse
import json
import logging
import sys
from dataclasses import replace

from anylog import InvalidCalendarDate, parse, record_to_dict
from anylog.config import load_config, load_yaml_config, parse_offset

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [ANYLOG] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

SAMPLE_LINES = [
    '2015-05-13 17:39:16 +0200: Repaired \'Library/Printers/Canon/IJScanner/Resources/Parameters/CNQ9601\'',
    '<34>1 2003-10-11T22:14:15.003Z mymachine.example.com su - ID47 - \'su root\' failed for lonvick on /dev/pts/8',
    '[10/Oct/2000:13:55:36 -0700] "GET /apache_pb.gif HTTP/1.0" 200 2326',
    '[2018.10.29-16.56.37:542][  0]LogInit: Selected Device Profile: [WindowsNoEditor]',
    'Tue Nov 21 00:30:05 2017 More stuff here',
    '[Sun Feb 25 06:11:12.043123448 2018] [:notice] [pid 1:tid 2] process manager initialized (pid 1)',
    'Jan 03, 2016 22:29:55 [0x70000073b000] DEBUG - Responding HTTP/1.1 200',
    '<13>Jan  5 14:30:01 myhost sshd[12345]: Accepted publickey for user from 192.168.1.50 port 22',
    'Jun  1 12:00:00 host app[123]: boot ok',
    '2024-01-15 10:30:00,125 INFO auth-service Application started',
    '22:07:10 server  | detected binary path: /usr/local/bin/uwsgi',
    'no timestamp here at all',
]


def _print_record(line: str, config) -> str | None:
    try:
        record = parse(line, config)
    except InvalidCalendarDate as e:
        logger.warning("Skipping line %r: %s", line, e)
        return None
    label = f"[{(record.grammar or 'none').upper()}]"
    status = "OK" if record.has_timestamp else "NO TIMESTAMP"
    print(f"\n--- {label} {status} ---")
    print(json.dumps(record_to_dict(record), indent=2))
    return record.grammar


def _summarize(title: str, grammars: list[str | None]):
    counts: dict[str, int] = {}
    for name in grammars:
        key = name or "none"
        counts[key] = counts.get(key, 0) + 1
    matched = sum(1 for name in grammars if name)

    print(f"\n{'=' * 60}")
    print(f"{title}: {matched} with timestamp, {len(grammars) - matched} without, {len(grammars)} total")
    print(f"Grammars: {counts}")
    print("=" * 60)


def demo_hardcoded(config):
    """Parse hardcoded sample lines and print results."""
    print("=" * 60)
    print("anylog demo")
    print("=" * 60)

    grammars = [_print_record(line, config) for line in SAMPLE_LINES]
    _summarize("Summary", grammars)


def demo_file(filepath: str, config):
    """Parse all non-empty lines in a file and print results."""
    print(f"\n{'=' * 60}")
    print(f"Parsing file: {filepath}")
    print("=" * 60)

    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        lines = [line.rstrip("\r\n") for line in f]

    grammars = [_print_record(line, config) for line in lines if line]
    _summarize("File summary", grammars)


def main():
    parser = argparse.ArgumentParser(description="anylog demo")
    parser.add_argument("--file", "-f", help="Path to a log file to parse")
    parser.add_argument("--config", "-c", help="Path to a YAML config file")
    parser.add_argument("--fallback-offset", help="UTC offset for lines without a zone, e.g. +02:00")
    args = parser.parse_args()

    config = load_config(load_yaml_config(args.config))
    if args.fallback_offset:
        parse_offset(args.fallback_offset)
        config = replace(config, fallback_offset=args.fallback_offset)
    logger.info(
        "Config: fallback_offset=%s, future_tolerance_days=%s",
        config.fallback_offset, config.future_tolerance_days,
    )

    demo_hardcoded(config)

    if args.file:
        demo_file(args.file, config)


if __name__ == "__main__":
    main()
