"""
Unit tests for metrics module.
"""
import unittest
import pandas as pd
import numpy as np
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from qb_epa_analysis.config import MODEL_CATALOGUE
from qb_epa_analysis.data.loader import DataLoader
from qb_epa_analysis.data.preprocessor import clean, train_test_split_by_week
from qb_epa_analysis.models.linear_suite import INTERCEPT, LinearModelSuite
from qb_epa_analysis.utils.metrics import (
    FIT_COLUMNS,
    TEST_COLUMNS,
    MissingPredictorError,
    RegressionEvaluator,
)

SAMPLE_FILE = os.path.join(os.path.dirname(__file__), 'data', 'qb_weeks_sample.csv')


class TestRegressionEvaluator(unittest.TestCase):
    """Test cases for RegressionEvaluator class."""

    @classmethod
    def setUpClass(cls):
        df = clean(DataLoader().load_player_stats(SAMPLE_FILE))
        cls.train, cls.test = train_test_split_by_week(df, 9)
        cls.models = LinearModelSuite().fit_all(cls.train)

    def setUp(self):
        self.evaluator = RegressionEvaluator()

    def test_fit_quality(self):
        """In-sample statistics are consistent with each other."""
        model = self.models['all']
        quality = self.evaluator.fit_quality(model, self.train)

        self.assertGreater(quality['r_squared'], 0.5)
        self.assertLessEqual(quality['r_squared'], 1.0)
        self.assertLess(quality['adj_r_squared'], quality['r_squared'])
        self.assertGreater(quality['rmse'], 0)
        self.assertIsInstance(quality['n_obs'], int)
        self.assertEqual(quality['n_obs'], len(self.train))
        # RSE divides by n - p, RMSE by n
        n, p = len(self.train), model.n_params
        self.assertAlmostEqual(
            quality['residual_std_error'], quality['rmse'] * np.sqrt(n / (n - p)), places=9
        )

    def test_adjusted_r_squared_formula(self):
        self.assertAlmostEqual(
            self.evaluator.calculate_adj_r_squared(0.5, 101, 5), 1 - 0.5 * 100 / 95
        )
        self.assertTrue(np.isnan(self.evaluator.calculate_adj_r_squared(0.9, 3, 2)))

    def test_predict(self):
        """One prediction record per test row, carrying identity fields."""
        model = self.models['all']
        predictions = self.evaluator.predict(model, self.test)

        self.assertEqual(len(predictions), len(self.test))
        for col in ('player_name', 'recent_team', 'season', 'week', 'model', 'actual', 'predicted'):
            self.assertIn(col, predictions.columns)
        self.assertTrue((predictions['model'] == 'all').all())
        np.testing.assert_allclose(predictions['actual'], self.test['passing_epa'].to_numpy())
        np.testing.assert_allclose(predictions['predicted'], model.predict(self.test))

    def test_predict_applies_coefficients(self):
        model = self.models['passing_yards']
        row = self.test.iloc[[0]]
        predictions = self.evaluator.predict(model, row)

        expected = model.intercept + model.coefficients['passing_yards'] * row['passing_yards'].iloc[0]
        self.assertAlmostEqual(predictions['predicted'].iloc[0], expected, places=9)

    def test_predict_extrapolates(self):
        """Predictor values far outside the training range are allowed."""
        far = self.test.iloc[[0]].copy()
        far['passing_yards'] = 5000.0
        predictions = self.evaluator.predict(self.models['passing_yards'], far)

        self.assertTrue(np.isfinite(predictions['predicted']).all())
        self.assertGreater(predictions['predicted'].iloc[0], self.train['passing_epa'].max())

    def test_predict_missing_predictor(self):
        holes = self.test.copy()
        holes.loc[holes.index[:2], 'interceptions'] = pd.NA

        with self.assertRaises(MissingPredictorError) as ctx:
            self.evaluator.predict(self.models['all'], holes)
        self.assertEqual(ctx.exception.columns, ['interceptions'])
        self.assertEqual(ctx.exception.n_rows, 2)

        # a model that does not use the column is unaffected
        predictions = self.evaluator.predict(self.models['passing_yards'], holes)
        self.assertEqual(len(predictions), len(holes))

    def test_out_of_sample_metrics(self):
        predictions = self.evaluator.predict(self.models['all'], self.test)
        metrics = self.evaluator.out_of_sample_metrics(predictions)

        self.assertEqual(set(metrics), set(TEST_COLUMNS))
        self.assertGreater(metrics['test_rmse'], 0)
        self.assertLessEqual(metrics['test_mae'], metrics['test_rmse'])

        empty = self.evaluator.out_of_sample_metrics(predictions.iloc[0:0])
        self.assertTrue(all(np.isnan(v) for v in empty.values()))

    def test_compare_models(self):
        """Rows follow the catalogue; unused coefficients are NaN."""
        comparison = self.evaluator.compare_models(self.models, self.train, self.test)

        self.assertEqual(list(comparison.index), list(MODEL_CATALOGUE))
        for col in [INTERCEPT, *MODEL_CATALOGUE['all'], *FIT_COLUMNS, *TEST_COLUMNS]:
            self.assertIn(col, comparison.columns)
        self.assertTrue(np.isnan(comparison.loc['completions', 'passing_yards']))
        self.assertAlmostEqual(
            comparison.loc['all', 'interceptions'],
            self.models['all'].coefficients['interceptions'],
        )

    def test_compare_models_without_test(self):
        comparison = self.evaluator.compare_models(self.models, self.train)
        for col in TEST_COLUMNS:
            self.assertNotIn(col, comparison.columns)

    def test_select_best_model_on_sample(self):
        comparison = self.evaluator.compare_models(self.models, self.train)
        self.assertEqual(self.evaluator.select_best_model(comparison), 'all')


class TestSelectBestModel(unittest.TestCase):
    """Selection policy on hand-built comparison tables."""

    def table(self, rows):
        return pd.DataFrame(rows, columns=['model', 'r_squared', 'adj_r_squared', 'rmse']).set_index('model')

    def test_outright_winner(self):
        comparison = self.table([
            ('passing_yards', 0.60, 0.59, 5.0),
            ('all', 0.80, 0.78, 3.0),
        ])
        self.assertEqual(RegressionEvaluator.select_best_model(comparison), 'all')

    def test_disagreement_falls_back_to_adjusted_r_squared(self):
        comparison = self.table([
            ('passing_yards', 0.70, 0.69, 4.0),
            ('all', 0.71, 0.65, 3.9),
        ])
        with self.assertLogs('qb_epa_analysis.utils.metrics', level='WARNING'):
            best = RegressionEvaluator.select_best_model(comparison)
        self.assertEqual(best, 'passing_yards')

    def test_tie_goes_to_first_in_table(self):
        comparison = self.table([
            ('completions', 0.5, 0.5, 4.0),
            ('attempts', 0.5, 0.5, 4.0),
        ])
        self.assertEqual(RegressionEvaluator.select_best_model(comparison), 'completions')

    def test_empty_table(self):
        with self.assertRaises(ValueError):
            RegressionEvaluator.select_best_model(self.table([]))


if __name__ == '__main__':
    unittest.main()
