import pytest


@pytest.fixture
def recorded_compiles(monkeypatch):
    """Replace the engine in the pipeline with one that records its input text."""
    import adblock_updater.pipeline as pipeline
    from adblock_updater.compiler import CompileStats, join_rules

    calls = []

    def fake_compile(blobs):
        text = join_rules(blobs)
        calls.append(text)
        data = ("DAT:" + text).encode("utf-8")
        return data, CompileStats(input_lines=len(text.split("\n")), output_bytes=len(data))

    monkeypatch.setattr(pipeline, "compile_with_stats", fake_compile)
    return calls
