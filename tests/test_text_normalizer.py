import unittest

from application.services.text_normalizer import (
    estimate_ocr_confidence,
    extract_text_structure,
    process_text,
)
from domain.entities import NormalizationOptions

ALL_OFF = NormalizationOptions(remove_extra_spaces=False, fix_line_breaks=False, preserve_structure=False)

NOISY_SAMPLES = [
    "This is   a   test.\n\n\n\nNext line",
    "  Scanned\tpage  one .It continues\nhere and\nThen stops!   ",
    "end.\n@Next paragraph starts here",
    "word\n#Capital after noise",
    "a @ b ## c",
    "Price: 5€ , paid.\r\nThanks",
    "“Quoted” — text… and more.Trailing",
    "  \n  \n\t\n  ",
    "line one\n\n\n\n\n   line two   \n\n\nLine three.\nLine four",
    "Hello\n.World",
]


class TestProcessText(unittest.TestCase):
    def test_collapses_blank_lines_and_spaces(self):
        options = NormalizationOptions(remove_extra_spaces=True, fix_line_breaks=True, preserve_structure=True)
        self.assertEqual(
            process_text("This is   a   test.\n\n\n\nNext line", options),
            "This is a test.\n\nNext line",
        )

    def test_whitespace_collapse_only(self):
        options = NormalizationOptions(remove_extra_spaces=True, fix_line_breaks=False, preserve_structure=False)
        self.assertEqual(process_text("  a \t b  \n  c  ", options), "a b\nc")

    def test_sentence_end_before_capital_becomes_paragraph(self):
        self.assertEqual(process_text("First line.\nSecond line"), "First line.\n\nSecond line")

    def test_wrapped_line_is_joined(self):
        self.assertEqual(process_text("this sentence was\nWrapped here"), "this sentence was Wrapped here")

    def test_lowercase_continuation_keeps_break(self):
        self.assertEqual(process_text("alpha\nbeta"), "alpha\nbeta")

    def test_structure_normalization_strips_lines(self):
        options = NormalizationOptions(remove_extra_spaces=False, fix_line_breaks=False, preserve_structure=True)
        self.assertEqual(process_text("  one  \n\n\n\n  two  ", options), "one\n\ntwo")

    def test_final_cleanup_always_runs(self):
        self.assertEqual(process_text("Price: 5€ @home #tag", ALL_OFF), "Price: 5 home tag")
        self.assertEqual(process_text("Hello , world !", ALL_OFF), "Hello, world!")
        self.assertEqual(process_text("Done.Next step", ALL_OFF), "Done. Next step")

    def test_removed_symbols_do_not_leave_double_spaces(self):
        self.assertEqual(process_text("“Quoted” — text…"), "Quoted text")

    def test_standardize_format_keeps_typographic_marks(self):
        options = NormalizationOptions(standardize_format=True)
        self.assertEqual(process_text("“Quoted” — text…", options), '"Quoted" - text...')

    def test_join_hyphenated_words(self):
        options = NormalizationOptions(join_hyphenated_words=True)
        self.assertEqual(process_text("infor-\nmation retrieval", options), "information retrieval")

    def test_never_fails_on_degenerate_input(self):
        self.assertEqual(process_text(""), "")
        self.assertEqual(process_text("   \t\n "), "")
        self.assertEqual(process_text("@#$%^&*", ALL_OFF), "")

    def test_idempotent_for_every_flag_combination(self):
        for flags in range(8):
            options = NormalizationOptions(
                remove_extra_spaces=bool(flags & 1),
                fix_line_breaks=bool(flags & 2),
                preserve_structure=bool(flags & 4),
            )
            for sample in NOISY_SAMPLES:
                with self.subTest(flags=flags, sample=sample):
                    once = process_text(sample, options)
                    self.assertIsInstance(once, str)
                    self.assertEqual(process_text(once, options), once)

    def test_output_growth_is_bounded_by_sentence_boundaries(self):
        for sample in NOISY_SAMPLES:
            with self.subTest(sample=sample):
                boundaries = sum(sample.count(mark) for mark in ".!?")
                self.assertLessEqual(len(process_text(sample)), len(sample) + boundaries)


class TestTextStructure(unittest.TestCase):
    def test_structure_of_two_paragraphs(self):
        text = (
            "One two three four five six. Seven eight nine ten eleven twelve.\n\n"
            "Thirteen fourteen fifteen sixteen seventeen eighteen."
        )
        structure = extract_text_structure(text)
        self.assertEqual(len(structure.paragraphs), 2)
        self.assertEqual(len(structure.sentences), 3)
        self.assertEqual(structure.word_count, 18)
        self.assertAlmostEqual(structure.confidence, 0.9)

    def test_empty_text(self):
        structure = extract_text_structure("")
        self.assertEqual(structure.paragraphs, [])
        self.assertEqual(structure.word_count, 0)
        self.assertAlmostEqual(structure.confidence, 0.5)


class TestOcrConfidence(unittest.TestCase):
    def test_empty_text_scores_zero(self):
        self.assertEqual(estimate_ocr_confidence(""), 0)

    def test_short_clean_text_keeps_base_score(self):
        self.assertEqual(estimate_ocr_confidence("Short text."), 50)

    def test_symbol_noise_is_penalized(self):
        self.assertEqual(estimate_ocr_confidence("@@@@ ####"), 30)

    def test_long_varied_text_scores_high(self):
        text = "The quick brown fox jumps over the lazy dog. " * 5
        self.assertEqual(estimate_ocr_confidence(text), 95)


if __name__ == "__main__":
    unittest.main()
