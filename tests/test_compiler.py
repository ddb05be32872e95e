import adblock
import pytest

import adblock_updater.compiler as compiler
from adblock_updater.compiler import CompileError, compile_rules, compile_with_stats, join_rules


RULES_A = "||ads.example.com^\n||tracker.example.net^$third-party"
RULES_B = "@@||ads.example.com/allowed.js\nexample.org##.banner"


def test_join_rules_keeps_order():
    assert join_rules(["||a.com", "||b.com"]) == "||a.com\n||b.com"
    assert join_rules(["||b.com", "||a.com"]) == "||b.com\n||a.com"
    assert join_rules([]) == ""


def test_compile_is_deterministic():
    first = compile_rules([RULES_A, RULES_B])
    second = compile_rules([RULES_A, RULES_B])

    assert isinstance(first, bytes)
    assert first
    assert first == second


def test_serialized_engine_loads_back():
    data = compile_rules([RULES_A])

    engine = adblock.Engine(adblock.FilterSet())
    engine.deserialize(data)

    blocked = engine.check_network_urls("https://ads.example.com/banner.js", "https://example.com/", "script")
    assert blocked.matched


def test_compile_stats():
    data, stats = compile_with_stats([RULES_A, "", RULES_B])

    assert stats.input_lines == 5
    assert stats.rule_lines == 4
    assert stats.output_bytes == len(data)


def test_engine_failure_is_wrapped(monkeypatch):
    def broken_engine(*args, **kwargs):
        raise ValueError("engine exploded")

    monkeypatch.setattr(compiler.adblock, "Engine", broken_engine)

    with pytest.raises(CompileError, match="engine exploded") as excinfo:
        compile_rules([RULES_A])

    assert isinstance(excinfo.value.__cause__, ValueError)
