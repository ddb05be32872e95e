#!/usr/bin/env python3
"""
compiler.py - Filter Engine Compilation and Serialization

Hands rule text to the adblock engine (Python bindings for adblock-rust) and
returns the serialized engine, which is what gets written as a DAT file.

Rule parsing, the matching structures and the DAT layout all belong to the
engine. This module only joins rule text and drives the engine:

    blobs -> "\\n".join -> FilterSet.add_filter_list -> Engine -> serialize()

Identical input text produces identical bytes.

Usage:
    python -m adblock_updater.compiler <rules_file> [<rules_file> ...] <output.dat>
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import adblock


class CompileError(Exception):
    """The filter engine failed to compile or serialize the rules."""


@dataclass
class CompileStats:
    """Statistics from one compilation."""
    input_lines: int = 0
    rule_lines: int = 0
    output_bytes: int = 0


def join_rules(blobs: Sequence[str]) -> str:
    """Join rule text blobs with newlines, keeping their order."""
    return "\n".join(blobs)


def compile_with_stats(blobs: Sequence[str]) -> tuple[bytes, CompileStats]:
    """
    Compile rule blobs into a serialized engine.

    Returns:
        (serialized engine bytes, CompileStats)

    Raises:
        CompileError: anything the engine raised, chained as __cause__
    """
    rules = join_rules(blobs)
    lines = rules.split("\n")

    stats = CompileStats()
    stats.input_lines = len(lines)
    stats.rule_lines = sum(1 for line in lines if line.strip())

    try:
        filter_set = adblock.FilterSet()
        filter_set.add_filter_list(rules)
        engine = adblock.Engine(filter_set)
        data = bytes(engine.serialize())
    except Exception as e:
        raise CompileError(f"Filter engine failed: {e}") from e

    stats.output_bytes = len(data)
    return data, stats


def compile_rules(blobs: Sequence[str]) -> bytes:
    """Compile rule blobs and return the serialized engine."""
    data, _ = compile_with_stats(blobs)
    return data


def main() -> int:
    """Compile local rule files into a DAT file."""
    if len(sys.argv) < 3:
        print("Usage: python -m adblock_updater.compiler <rules_file> [<rules_file> ...] <output.dat>")
        return 2

    inputs = [Path(p) for p in sys.argv[1:-1]]
    output = Path(sys.argv[-1])

    try:
        blobs = [p.read_text(encoding="utf-8-sig", errors="replace") for p in inputs]
        data, stats = compile_with_stats(blobs)
        output.write_bytes(data)
    except (OSError, CompileError) as e:
        print(f"❌ ERROR: {e}", file=sys.stderr)
        return 1

    print(f"   {stats.rule_lines:,} rules from {len(inputs)} files -> {output} ({stats.output_bytes:,} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
