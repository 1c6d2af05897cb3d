"""Tests for the metadata enhancer."""

from meetprep.vault.enhancer import enhance, extract_hashtags, extract_links
from meetprep.vault.models import VaultFile


def make_file(content: str, tags: list[str] | None = None) -> VaultFile:
    return VaultFile(path="/vault/note.md", title="Note", content=content, tags=tags or [])


class TestExtractLinks:
    def test_wiki_links(self):
        links = extract_links("See [[Project Alpha]] and [[People/Jane|Jane]].")
        assert links == ["Project Alpha", "People/Jane"]

    def test_markdown_links(self):
        links = extract_links("Read [the doc](https://example.com/doc) and [notes](notes.md).")
        assert links == ["https://example.com/doc", "notes.md"]

    def test_links_are_deduplicated(self):
        links = extract_links("[[Alpha]] then [[Alpha]] and [a](x.md) [b](x.md)")
        assert links == ["Alpha", "x.md"]

    def test_malformed_markdown(self):
        assert extract_links("[[unclosed and [broken](link") == []


class TestExtractHashtags:
    def test_hashtags(self):
        assert extract_hashtags("Discussed #budget and #q3-plan with #team_a") == [
            "budget",
            "q3-plan",
            "team_a",
        ]

    def test_headings_are_not_tags(self):
        assert extract_hashtags("# Heading\n## Sub heading") == []

    def test_url_fragments_are_not_tags(self):
        assert extract_hashtags("https://example.com/page#section") == []

    def test_numeric_references_are_not_tags(self):
        assert extract_hashtags("Fixed in #123") == []


class TestEnhance:
    def test_enhanced_tags_union(self):
        file = make_file("Talked about #acme and #pricing", tags=["acme", "kickoff"])

        enhanced = enhance(file)

        assert enhanced.enhanced_tags == ["acme", "kickoff", "pricing"]
        assert enhanced.all_tags == ["acme", "kickoff", "pricing"]
        # The input is not modified
        assert file.enhanced_tags == []

    def test_tags_are_case_sensitive(self):
        enhanced = enhance(make_file("#Acme", tags=["acme"]))
        assert enhanced.enhanced_tags == ["acme", "Acme"]

    def test_links_populated(self):
        enhanced = enhance(make_file("Linked to [[Roadmap]]"))
        assert enhanced.links == ["Roadmap"]

    def test_error_returns_original(self):
        file = VaultFile(path="/vault/bad.md", content=None)  # type: ignore[arg-type]

        assert enhance(file) is file
