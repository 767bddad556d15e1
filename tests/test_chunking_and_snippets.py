import unittest

from application.services.snippets import NO_CONTENT, generate_snippet
from infrastructure.splitting.paragraph_chunker import ParagraphChunker


class TestParagraphChunker(unittest.TestCase):
    def test_short_content_is_single_chunk(self):
        chunks = ParagraphChunker(max_chunk_size=100).split("n1", "Short note.")

        self.assertEqual([(c.note_id, c.index, c.text) for c in chunks], [("n1", 0, "Short note.")])

    def test_empty_content_still_yields_a_chunk(self):
        self.assertEqual([c.text for c in ParagraphChunker().split("n1", "")], [""])

    def test_paragraphs_are_packed(self):
        content = "aaaa\n\nbbbb\n\ncccccccccc"

        chunks = ParagraphChunker(max_chunk_size=12).split("n1", content)

        self.assertEqual([c.text for c in chunks], ["aaaa\n\nbbbb", "cccccccccc"])
        self.assertEqual([c.index for c in chunks], [0, 1])

    def test_long_paragraph_falls_back_to_sentences(self):
        content = "First sentence here. Second sentence here. Third one"

        chunks = ParagraphChunker(max_chunk_size=25).split("n1", content)

        self.assertEqual(
            [c.text for c in chunks],
            ["First sentence here", "Second sentence here", "Third one"],
        )


class TestGenerateSnippet(unittest.TestCase):
    def test_missing_content(self):
        self.assertEqual(generate_snippet(None, "q"), NO_CONTENT)
        self.assertEqual(generate_snippet("", "q"), NO_CONTENT)

    def test_window_around_match(self):
        content = "x" * 100 + " needle " + "y" * 100

        snippet = generate_snippet(content, "NEEDLE")

        self.assertTrue(snippet.startswith("..."))
        self.assertTrue(snippet.endswith("..."))
        self.assertIn("needle", snippet)
        self.assertEqual(len(snippet), 3 + 40 + len("needle") + 40 + 3)

    def test_fallback_to_leading_text(self):
        content = "z" * 200

        self.assertEqual(generate_snippet(content, "absent"), "z" * 120 + "...")
        self.assertEqual(generate_snippet("brief", "absent"), "brief")


if __name__ == "__main__":
    unittest.main()
