"""
Unit tests for the metadata comment-block extractor.
"""

import unittest

from docbinder.indexing.metadata import (
    MetadataExtractor,
    extract_metadata,
    load_lenient,
    parse_lenient_array,
    strip_quotes,
)


class TestMetadataExtractor(unittest.TestCase):
    """Test metadata extraction from document text."""

    def test_no_comment_block(self):
        """Documents without a comment block have no metadata."""
        self.assertEqual(extract_metadata("# Title\n\nJust text."), {})
        self.assertEqual(extract_metadata(""), {})

    def test_scalar_and_quoted_values(self):
        """Bare tokens are kept, surrounding quotes are stripped."""
        text = """<!--
title: "Singleton Pattern"
author: 'Jane Doe'
level: beginner
-->
# Singleton
"""
        meta = extract_metadata(text)

        self.assertEqual(meta["title"], "Singleton Pattern")
        self.assertEqual(meta["author"], "Jane Doe")
        self.assertEqual(meta["level"], "beginner")

    def test_single_line_array(self):
        """Array keys parse inline arrays."""
        meta = extract_metadata('<!-- \ntags: ["creational","gof"]\n-->')
        self.assertEqual(meta["tags"], ["creational", "gof"])

    def test_multi_line_array_with_trailing_commas(self):
        """Arrays may span lines and use trailing commas and mixed quoting."""
        text = """<!--
title:   Observer  
references: [
  { title: "GoF book", url: "https://example.com/gof" },
  { title: 'Refactoring Guru', url: "https://example.com/observer", },
]
tags: ['behavioral', "gof",],
-->
"""
        meta = extract_metadata(text)

        self.assertEqual(meta["title"], "Observer")
        self.assertEqual(len(meta["references"]), 2)
        self.assertEqual(meta["references"][0]["title"], "GoF book")
        self.assertEqual(meta["references"][1]["url"], "https://example.com/observer")
        self.assertEqual(meta["tags"], ["behavioral", "gof"])

    def test_tab_indented_multi_line_array(self):
        """Tabs are whitespace like any other inside an array."""
        meta = extract_metadata('<!--\ntags: [\n\t"a",\n\t"b",\n]\n-->')
        self.assertEqual(meta["tags"], ["a", "b"])

        meta = extract_metadata("<!--\nreferences: [\n\t{\ttitle: 'GoF',\turl: \"https://example.com\" },\n]\n-->")
        self.assertEqual(meta["references"], [{"title": "GoF", "url": "https://example.com"}])

    def test_tabs_around_keys_and_values(self):
        """Tabs may separate keys, colons and values."""
        meta = extract_metadata('<!--\n\ttitle:\t"Tabbed"\n\ttags:\t["x",\t"y"]\n-->')

        self.assertEqual(meta["title"], "Tabbed")
        self.assertEqual(meta["tags"], ["x", "y"])

    def test_crlf_line_endings(self):
        """Windows line endings leave no carriage returns in values."""
        text = '<!--\r\ntitle: "Windows"\r\nlevel: advanced\r\ntags: [\r\n  "a",\r\n  "b"\r\n]\r\n-->\r\n# Body\r\n'
        meta = extract_metadata(text)

        self.assertEqual(meta, {"title": "Windows", "level": "advanced", "tags": ["a", "b"]})

    def test_structural_keys_are_plain_values(self):
        """Keys like children or type are extracted as ordinary strings."""
        meta = extract_metadata("<!--\nchildren: none\ntype: directory\nlabel: Other\n-->")
        self.assertEqual(meta, {"children": "none", "type": "directory", "label": "Other"})

    def test_malformed_array_degrades_to_empty(self):
        """Unparseable arrays become empty lists without losing other keys."""
        text = '<!--\ntags: ["unterminated, "x"]\ntitle: Kept\n-->'
        meta = extract_metadata(text)

        self.assertEqual(meta["tags"], [])
        self.assertEqual(meta["title"], "Kept")

    def test_truncated_array_block(self):
        """An array still open when the block ends becomes an empty list."""
        text = "<!--\ntitle: Draft\ntags: [\n  'one',\n  'two'\n-->"
        meta = extract_metadata(text)

        self.assertEqual(meta["title"], "Draft")
        self.assertEqual(meta["tags"], [])

    def test_unterminated_comment_yields_empty(self):
        """A comment that is never closed is not a metadata block."""
        self.assertEqual(extract_metadata("<!--\ntitle: Lost\n"), {})

    def test_only_first_comment_block_is_read(self):
        """Later comments in the document are ignored."""
        text = "<!-- title: First -->\n\ntext\n\n<!-- title: Second -->"
        self.assertEqual(extract_metadata(text), {"title": "First"})

    def test_non_array_keys_keep_bracket_text(self):
        """Only configured keys are parsed as arrays."""
        meta = extract_metadata("<!--\nnote: [draft]\n-->")
        self.assertEqual(meta["note"], "[draft]")

    def test_custom_array_keys(self):
        """Array keys are configurable."""
        extractor = MetadataExtractor(array_keys=["authors"])
        meta = extractor.extract('<!--\nauthors: ["a", "b"]\ntags: ["x"]\n-->')

        self.assertEqual(meta["authors"], ["a", "b"])
        self.assertEqual(meta["tags"], '["x"]')


class TestLenientHelpers(unittest.TestCase):
    """Test the parsing helpers."""

    def test_parse_lenient_array_rejects_non_arrays(self):
        self.assertEqual(parse_lenient_array("{a: 1}"), [])
        self.assertEqual(parse_lenient_array("plain"), [])
        self.assertEqual(parse_lenient_array("[1, 2,]"), [1, 2])

    def test_load_lenient(self):
        self.assertEqual(load_lenient('{\n\t"title": "Design Patterns"\n}'), {"title": "Design Patterns"})
        self.assertEqual(load_lenient("{title: 'Relaxed', tags: [a, b,],}"), {"title": "Relaxed", "tags": ["a", "b"]})
        self.assertEqual(load_lenient('"tab\\tescape"'), "tab\tescape")
        self.assertIsNone(load_lenient(""))

    def test_strip_quotes(self):
        self.assertEqual(strip_quotes('"quoted"'), "quoted")
        self.assertEqual(strip_quotes("'quoted'"), "quoted")
        self.assertEqual(strip_quotes("'mismatched\""), "'mismatched\"")
        self.assertEqual(strip_quotes('"'), '"')


if __name__ == '__main__':
    unittest.main()
