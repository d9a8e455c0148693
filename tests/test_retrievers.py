import tempfile
import unittest
from pathlib import Path

from src.retrieval.dense_retriever import DenseRetriever
from src.retrieval.hybrid_retriever import HybridRetriever
from src.retrieval.sparse_retriever import SparseRetriever
from src.utils.file_utils import list_sorted_files, load_vector


class RetrieverFixture(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        root = Path(self.tmp.name)
        self.corpus_dir = root / "corpus"
        self.embed_dir = root / "embeddings"
        self.corpus_dir.mkdir()
        self.embed_dir.mkdir()

        docs = {
            "a.txt": ("apple banana", "1 0"),
            "b.txt": ("banana cherry", "0 1"),
            "c.txt": ("durian", "1 1"),
        }
        for name, (text, vec) in docs.items():
            (self.corpus_dir / name).write_text(text, encoding="utf-8")
            (self.embed_dir / name).write_text(vec, encoding="utf-8")

        self.query_ref = root / "Q1"
        self.query_ref.write_text("0 1\n", encoding="utf-8")

    def tearDown(self):
        self.tmp.cleanup()


class TestFileUtils(RetrieverFixture):

    def test_sorted_by_name(self):
        for name in ("Q10", "Q2", "Q1"):
            (self.embed_dir / name).write_text("0", encoding="utf-8")
        names = [p.name for p in list_sorted_files(self.embed_dir)]
        self.assertEqual(names, ["Q1", "Q10", "Q2", "a.txt", "b.txt", "c.txt"])

    def test_malformed_vector(self):
        bad = Path(self.tmp.name) / "bad"
        bad.write_text("0.1 x", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_vector(bad)


class TestDenseRetriever(RetrieverFixture):

    def test_cosine_ranking(self):
        results = DenseRetriever(str(self.embed_dir)).retrieve(self.query_ref, "")
        self.assertEqual([doc_id for doc_id, _ in results], ["b.txt", "c.txt", "a.txt"])
        self.assertAlmostEqual(results[0][1], 1.0)

    def test_dimension_mismatch(self):
        wrong = Path(self.tmp.name) / "Q2"
        wrong.write_text("1 0 0", encoding="utf-8")
        with self.assertRaises(ValueError):
            DenseRetriever(str(self.embed_dir)).retrieve(wrong, "")


class TestSparseRetriever(RetrieverFixture):

    def test_only_matching_documents(self):
        results = SparseRetriever(str(self.corpus_dir)).retrieve(None, "cherry")
        self.assertEqual([doc_id for doc_id, _ in results], ["b.txt"])

    def test_unknown_terms(self):
        self.assertEqual(SparseRetriever(str(self.corpus_dir)).retrieve(None, "zebra"), [])


class TestHybridRetriever(RetrieverFixture):

    def build(self, lam):
        return HybridRetriever.from_directories(str(self.corpus_dir), str(self.embed_dir), lam)

    def test_scores_non_increasing_and_deterministic(self):
        retriever = self.build(0.5)
        first = retriever.retrieve(self.query_ref, "apple banana")
        scores = [s for _, s in first]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(first, retriever.retrieve(self.query_ref, "apple banana"))

    def test_lambda_zero_is_dense_only(self):
        results = self.build(0.0).retrieve(self.query_ref, "apple")
        self.assertEqual(results[0][0], "b.txt")

    def test_lambda_one_is_sparse_only(self):
        results = self.build(1.0).retrieve(None, "apple")
        self.assertEqual(results[0][0], "a.txt")
        self.assertEqual([s for _, s in results[1:]], [0.0, 0.0])

    def test_lambda_out_of_range(self):
        with self.assertRaises(ValueError):
            self.build(-0.1)


if __name__ == '__main__':
    unittest.main()
