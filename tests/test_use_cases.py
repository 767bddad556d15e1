import unittest

from application.services.semantic_search import SemanticSearchService
from application.services.text_normalizer import estimate_ocr_confidence
from application.use_cases.enhance_content import enhance_content
from application.use_cases.import_scanned_document import MAX_FILE_SIZE, import_scanned_document
from application.use_cases.ingest_notes import ingest_notes
from domain.entities import CandidateDocument, CompletionResult, OcrResult
from domain.interfaces import CompletionEngine, OcrEngine
from infrastructure.embedding.hashed_bow_embedder import HashedBagOfWordsEmbedder
from infrastructure.engines.in_memory_engine import InMemoryVectorEngine


class FakeOcrEngine(OcrEngine):
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def extract(self, data, file_name, content_type, language="eng"):
        self.calls.append((file_name, content_type, language))
        return self.result


class FakeCompletionEngine(CompletionEngine):
    def __init__(self):
        self.calls = []

    async def complete(self, messages, params):
        self.calls.append((list(messages), params))
        return CompletionResult(text="enhanced")


class TestIngestNotes(unittest.IsolatedAsyncioTestCase):
    async def test_content_is_normalized_before_indexing(self):
        engine = InMemoryVectorEngine(HashedBagOfWordsEmbedder())
        service = SemanticSearchService(engine)

        outcome = await ingest_notes(
            [
                CandidateDocument(id="n1", title="Scan", content="Hello   world.\n\n\n\nNext"),
                {"id": "v1", "title": "Clip", "content": None, "is_transcription": True},
            ],
            service=service,
        )

        self.assertEqual(outcome, {"n1": True, "v1": True})
        self.assertEqual(engine.entries["n1"].content, "Hello world.\n\nNext")
        self.assertEqual(engine.entries["v1"].source_type, "video")
        self.assertEqual(engine.entries["v1"].content, "")


class TestImportScannedDocument(unittest.IsolatedAsyncioTestCase):
    async def test_ocr_text_is_normalized_and_rescored(self):
        ocr = FakeOcrEngine(OcrResult(success=True, text="Scanned   text.\n\n\nSecond  page", confidence=10))

        result = await import_scanned_document(b"img", "page.png", "image/png", ocr_engine=ocr, language="fre")

        self.assertTrue(result.success)
        self.assertEqual(result.text, "Scanned text.\n\nSecond page")
        self.assertEqual(result.confidence, estimate_ocr_confidence(result.text))
        self.assertEqual(result.size, 3)
        self.assertEqual(ocr.calls, [("page.png", "image/png", "fre")])

    async def test_unsupported_type_is_rejected_without_ocr(self):
        ocr = FakeOcrEngine(OcrResult(success=True, text="never"))

        result = await import_scanned_document(b"text", "notes.txt", "text/plain", ocr_engine=ocr)

        self.assertFalse(result.success)
        self.assertTrue(result.error.startswith("Unsupported file type"))
        self.assertEqual(ocr.calls, [])

    async def test_oversized_file_is_rejected(self):
        ocr = FakeOcrEngine(OcrResult(success=True, text="never"))

        result = await import_scanned_document(bytes(MAX_FILE_SIZE + 1), "big.pdf", "application/pdf", ocr_engine=ocr)

        self.assertFalse(result.success)
        self.assertIn("File too large", result.error)

    async def test_ocr_failure_is_passed_through(self):
        failure = OcrResult(success=False, error="All OCR engines failed")

        result = await import_scanned_document(b"img", "page.png", "image/png", ocr_engine=FakeOcrEngine(failure))

        self.assertIs(result, failure)


class TestEnhanceContent(unittest.IsolatedAsyncioTestCase):
    async def test_short_content_is_rejected(self):
        engine = FakeCompletionEngine()

        result = await enhance_content("tiny", engine=engine)

        self.assertFalse(result.success)
        self.assertEqual(engine.calls, [])

    async def test_messages_sent_to_engine(self):
        engine = FakeCompletionEngine()

        result = await enhance_content("some noisy transcript text", engine=engine, instructions="Summarize.")

        self.assertEqual(result.text, "enhanced")
        messages, _ = engine.calls[0]
        self.assertEqual([m.role for m in messages], ["system", "user"])
        self.assertEqual(messages[1].content, "Summarize.\n\nsome noisy transcript text")


if __name__ == "__main__":
    unittest.main()
