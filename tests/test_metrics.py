import unittest

from src.retrieval.metrics import SUMMARY_DEPTH, build_trec_dicts, get_metric, rank_run_entry, summary_metrics


class TestSummaryMetrics(unittest.TestCase):

    def setUp(self):
        self.qrel_dict, self.run_dict = build_trec_dicts([
            ("Q0", ["docA", "docC"], rank_run_entry([("docA", 0.9), ("docB", 0.5), ("docC", 0.1)])),
            ("Q1", [], rank_run_entry([("docA", 0.7)])),
        ])

    def test_build_trec_dicts(self):
        self.assertEqual(self.qrel_dict["Q0"], {"docA": 1, "docC": 1})
        self.assertEqual(self.run_dict["Q0"], {"docA": 3.0, "docB": 2.0, "docC": 1.0})

    def test_average_precision(self):
        # AP = (1/1 + 2/3) / 2; Q1 has no judgments and is skipped
        self.assertAlmostEqual(get_metric(self.qrel_dict, self.run_dict, 'map'), 5 / 6, places=4)

    def test_summary_contains_requested_measures(self):
        summary = summary_metrics(self.qrel_dict, self.run_dict)
        self.assertEqual(set(summary), {'map', 'recip_rank', 'P_10'})
        self.assertAlmostEqual(summary['recip_rank'], 1.0)
        self.assertAlmostEqual(summary['P_10'], 0.2)

    def test_no_judgments_gives_empty_summary(self):
        qrel_dict, run_dict = build_trec_dicts([("Q0", [], rank_run_entry([("docA", 1.0)]))])
        self.assertEqual(summary_metrics(qrel_dict, run_dict), {})

    def test_graded_ratings_are_ignored(self):
        # A document rated 0.0 is still listed as relevant
        qrel_dict, _ = build_trec_dicts([("Q0", ("docA", "docB"), {})])
        self.assertEqual(qrel_dict["Q0"], {"docA": 1, "docB": 1})


class TestRankRunEntry(unittest.TestCase):

    def test_tied_scores_keep_evaluated_order(self):
        # trec_eval would put d001 first on equal raw scores
        ranking = [("d000", 0.0), ("d001", 0.0)]
        qrel_dict, run_dict = build_trec_dicts([("Q0", ["d000"], rank_run_entry(ranking))])
        self.assertEqual(run_dict["Q0"], {"d000": 2.0, "d001": 1.0})
        self.assertAlmostEqual(get_metric(qrel_dict, run_dict, 'map'), 1.0)

    def test_cut_to_depth(self):
        ranking = [(f"d{i:05d}", 0.0) for i in range(SUMMARY_DEPTH + 50)]
        entry = rank_run_entry(ranking)
        self.assertEqual(len(entry), SUMMARY_DEPTH)
        self.assertEqual(entry["d00000"], float(SUMMARY_DEPTH))
        self.assertNotIn(f"d{SUMMARY_DEPTH:05d}", entry)

    def test_custom_depth(self):
        self.assertEqual(rank_run_entry([("a", 0.3), ("b", 0.2), ("c", 0.1)], depth=2), {"a": 2.0, "b": 1.0})

    def test_empty_ranking(self):
        self.assertEqual(rank_run_entry([]), {})


if __name__ == '__main__':
    unittest.main()
