import unittest

from domain.entities import CandidateDocument
from infrastructure.embedding.hashed_bow_embedder import HashedBagOfWordsEmbedder
from infrastructure.engines.in_memory_engine import InMemoryVectorEngine
from infrastructure.splitting.paragraph_chunker import ParagraphChunker

NOTES = [
    CandidateDocument(id="n1", title="Asyncio notes", content="Python asyncio event loop tutorial"),
    CandidateDocument(id="n2", title="Garden", content="Planting tomatoes and basil in spring"),
    CandidateDocument(
        id="v1",
        title="Cooking stream",
        content="Pasta sauce with fresh basil",
        source_type="video",
        metadata={"channel_name": "Kitchen"},
    ),
]


class TestInMemoryVectorEngine(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = InMemoryVectorEngine(HashedBagOfWordsEmbedder())
        for note in NOTES:
            await self.engine.index_note(note.id, note.title, note.content, note.source_type)

    async def test_best_match_ranks_first(self):
        results = await self.engine.search_notes(NOTES, "python asyncio event loop")

        self.assertEqual(results[0].id, "n1")
        self.assertGreater(results[0].relevance, 0.5)
        for result in results:
            self.assertGreaterEqual(result.relevance, 0.0)
            self.assertLessEqual(result.relevance, 1.0)
        relevances = [r.relevance for r in results]
        self.assertEqual(relevances, sorted(relevances, reverse=True))

    async def test_candidate_metadata_is_carried(self):
        results = await self.engine.search_notes(NOTES, "pasta sauce basil")

        video = next(r for r in results if r.id == "v1")
        self.assertEqual(video.source_type, "video")
        self.assertEqual(video.metadata["channel_name"], "Kitchen")
        self.assertIn("similarity", video.metadata)

    async def test_results_restricted_to_candidate_pool(self):
        results = await self.engine.search_notes([NOTES[1]], "python asyncio")

        self.assertEqual([r.id for r in results], ["n2"])

    async def test_reindex_replaces_entry(self):
        await self.engine.index_note("n1", "Asyncio notes", "Rewritten body about trio", "note")

        entries = self.engine.entries
        self.assertEqual(len(entries), 3)
        self.assertEqual(entries["n1"].content, "Rewritten body about trio")

    async def test_remove_is_idempotent(self):
        self.assertTrue(await self.engine.remove_note_index("n2"))
        self.assertTrue(await self.engine.remove_note_index("n2"))

        self.assertNotIn("n2", self.engine.entries)
        results = await self.engine.search_notes([], "tomatoes basil")
        self.assertNotIn("n2", [r.id for r in results])

    async def test_empty_index_returns_nothing(self):
        engine = InMemoryVectorEngine(HashedBagOfWordsEmbedder())

        self.assertEqual(await engine.search_notes(NOTES, "anything"), [])

    async def test_long_notes_are_chunked(self):
        engine = InMemoryVectorEngine(HashedBagOfWordsEmbedder(), chunker=ParagraphChunker(max_chunk_size=40))
        content = "First paragraph about rockets.\n\nSecond paragraph about oceans."

        await engine.index_note("long", "Mixed", content, "note")

        self.assertEqual(len(engine.entries["long"].chunks), 2)
        results = await engine.search_notes([], "oceans")
        self.assertIn("oceans", results[0].snippet)


class TestHashedBagOfWordsEmbedder(unittest.TestCase):
    def test_vectors_are_unit_length_and_deterministic(self):
        embedder = HashedBagOfWordsEmbedder(dimension=64)

        first, second = embedder.embed_texts(["alpha beta", "alpha beta"])

        self.assertEqual(len(first), 64)
        self.assertEqual(first, second)
        self.assertAlmostEqual(sum(v * v for v in first), 1.0, places=5)

    def test_empty_text_gives_zero_vector(self):
        embedder = HashedBagOfWordsEmbedder(dimension=8)

        self.assertEqual(embedder.embed_texts([""])[0], [0.0] * 8)


if __name__ == "__main__":
    unittest.main()
