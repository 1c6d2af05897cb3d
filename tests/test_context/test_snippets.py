"""Tests for snippet extraction."""

from meetprep.context.snippets import extract_snippets, truncate
from meetprep.vault.models import VaultFile


def make_file(content: str) -> VaultFile:
    return VaultFile(path="/vault/note.md", title="Note", content=content)


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("abcdefghij", 8) == "abcde..."
    assert len(truncate("x" * 500, 100)) == 100


def test_sentences_mentioning_tokens():
    file = make_file("Acme kickoff is next week. Unrelated sentence! **Budget** for acme is set?")

    snippets = extract_snippets(file, ["acme"], max_length=400)

    assert snippets == ["Acme kickoff is next week", "Budget for acme is set"]


def test_at_most_three_snippets():
    file = make_file(". ".join(f"Acme point {i}" for i in range(10)))

    assert len(extract_snippets(file, ["acme"], max_length=400)) == 3


def test_snippets_are_truncated():
    file = make_file("Acme " + "word " * 200 + ".")

    snippets = extract_snippets(file, ["acme"], max_length=50)

    assert len(snippets) == 1
    assert len(snippets[0]) == 50
    assert snippets[0].endswith("...")


def test_short_tokens_ignored():
    assert extract_snippets(make_file("An ox ran."), ["ox"], max_length=400) == []


def test_markdown_removed():
    file = make_file("## Acme [[Pricing Plan|pricing]] update")

    assert extract_snippets(file, ["acme"], max_length=400) == ["Acme pricing update"]
