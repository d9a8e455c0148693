import unittest

import numpy as np

from src.evaluation.errors import DegenerateQueryError, MissingRelevanceError
from src.evaluation.ndcg import (
    DEFAULT_NDCG_LIMIT,
    cumulative_dcg,
    gain_vector,
    ideal_gain_vector,
    ndcg_at_ranks,
)


class TestNDCG(unittest.TestCase):

    def setUp(self):
        self.ratings = {"docA": 1.0, "docB": 0.5}
        self.retrievals = [("docB", 0.9), ("docA", 0.8)]

    def test_two_document_scenario(self):
        """
        ratings {docA: 1.0, docB: 0.5}, K=2, ranking [docB, docA]:
          gains      = [0.5, 1.0]
          dcg        = [0.5, 0.5 + 1/log2(3)]   ~ [0.5, 1.131]
          ideal dcg  = [1.0, 1.0 + 0.5/log2(3)] ~ [1.0, 1.315]
          ndcg       ~ [0.5, 0.860]
        """
        gains = gain_vector(self.retrievals, self.ratings, k=2)
        np.testing.assert_allclose(gains, [0.5, 1.0])

        dcg = cumulative_dcg(gains)
        np.testing.assert_allclose(dcg, [0.5, 1.131], atol=1e-3)

        ideal = cumulative_dcg(ideal_gain_vector(self.ratings, k=2))
        np.testing.assert_allclose(ideal, [1.0, 1.315], atol=1e-3)

        ndcg = ndcg_at_ranks(self.retrievals, self.ratings, k=2)
        np.testing.assert_allclose(ndcg, [0.5, 0.860], atol=1e-3)

    def test_dcg_is_cumulative(self):
        dcg = cumulative_dcg(np.array([1.0, 0.0, 1.0, 0.0]))
        self.assertAlmostEqual(dcg[0], 1.0)
        self.assertAlmostEqual(dcg[1], 1.0)
        self.assertAlmostEqual(dcg[2], 1.0 + 1.0 / np.log2(4))
        self.assertAlmostEqual(dcg[3], dcg[2])

    def test_short_ranking_pads_gains_with_zero(self):
        gains = gain_vector([("docA", 1.0)], self.ratings)
        self.assertEqual(len(gains), DEFAULT_NDCG_LIMIT)
        self.assertEqual(gains[0], 1.0)
        self.assertTrue(np.all(gains[1:] == 0.0))

    def test_ideal_gains_sorted_and_truncated(self):
        ratings = {f"d{i}": i / 20 for i in range(20)}
        ideal = ideal_gain_vector(ratings, k=10)
        self.assertEqual(len(ideal), 10)
        self.assertAlmostEqual(ideal[0], 19 / 20)
        self.assertTrue(np.all(np.diff(ideal) <= 0))

    def test_perfect_ranking_scores_one(self):
        ranking = [("docA", 0.9), ("docB", 0.8), ("docX", 0.1)]
        np.testing.assert_allclose(ndcg_at_ranks(ranking, self.ratings), np.ones(DEFAULT_NDCG_LIMIT))

    def test_ndcg_is_bounded(self):
        rng = np.random.default_rng(3)
        ratings = {f"d{i}": float(rng.uniform(0.1, 1.0)) for i in range(15)}
        docs = [f"d{i}" for i in range(40)]
        ranking = [(d, 1.0 - i * 0.01) for i, d in enumerate(rng.permutation(docs).tolist())]

        ndcg = ndcg_at_ranks(ranking, ratings)
        self.assertTrue(np.all(ndcg >= 0.0))
        self.assertTrue(np.all(ndcg <= 1.0 + 1e-12))

    def test_no_relevant_documents_is_degenerate(self):
        with self.assertRaises(DegenerateQueryError):
            ndcg_at_ranks(self.retrievals, {}, query_index=4)

    def test_all_zero_ratings_is_degenerate(self):
        with self.assertRaises(DegenerateQueryError):
            ndcg_at_ranks(self.retrievals, {"docA": 0.0})

    def test_missing_rating_for_relevant_doc(self):
        with self.assertRaises(MissingRelevanceError) as ctx:
            gain_vector(self.retrievals, {"docA": 1.0}, relevant=frozenset({"docA", "docB"}))
        self.assertEqual(ctx.exception.doc_id, "docB")


if __name__ == '__main__':
    unittest.main()
