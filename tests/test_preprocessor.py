"""
Tests for the cleaning and week-split stages.
"""
import sys
import os

import numpy as np
import pandas as pd
import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from qb_epa_analysis.data.loader import DataLoader
from qb_epa_analysis.data.preprocessor import (
    DataPreprocessor,
    clean,
    train_test_split_by_week,
)

SAMPLE_FILE = os.path.join(os.path.dirname(__file__), 'data', 'qb_weeks_sample.csv')


@pytest.fixture
def sample():
    return DataLoader().load_player_stats(SAMPLE_FILE)


def make_weeks(weeks, epa=None):
    n = len(weeks)
    return pd.DataFrame({
        'player_name': [f'P{i}' for i in range(n)],
        'recent_team': ['DAL'] * n,
        'season': [2023] * n,
        'week': weeks,
        'passing_yards': np.linspace(100, 300, n),
        'completions': [20] * n,
        'attempts': [30] * n,
        'interceptions': [1] * n,
        'passing_tds': [2] * n,
        'passing_epa': epa if epa is not None else np.arange(n, dtype=float),
    })


class TestClean:

    def test_drops_only_missing_target(self, sample):
        cleaned = clean(sample)

        assert cleaned['passing_epa'].notna().all()
        assert len(cleaned) == sample['passing_epa'].notna().sum()
        assert len(cleaned) < len(sample)

    def test_rows_are_unmodified_and_in_order(self, sample):
        cleaned = clean(sample)

        assert list(cleaned.index) == sorted(cleaned.index)
        pd.testing.assert_frame_equal(cleaned, sample.loc[cleaned.index])

    def test_does_not_mutate_input(self, sample):
        before = sample.copy()
        clean(sample)
        pd.testing.assert_frame_equal(sample, before)

    def test_nothing_to_drop(self):
        df = make_weeks([1, 2, 3])
        pd.testing.assert_frame_equal(clean(df), df)


class TestSplitByWeek:

    @pytest.mark.parametrize('cutoff', [0, 1, 5, 9, 12, 17, 18])
    def test_exact_partition(self, sample, cutoff):
        df = clean(sample)
        train, test = train_test_split_by_week(df, cutoff)

        assert (train['week'] <= cutoff).all()
        assert (test['week'] > cutoff).all()
        assert len(train) + len(test) == len(df)
        assert set(train.index).isdisjoint(test.index)
        assert sorted(train.index.tolist() + test.index.tolist()) == sorted(df.index)

    def test_cutoff_week_goes_to_train(self):
        train, test = train_test_split_by_week(make_weeks([8, 9, 10]), 9)

        assert train['week'].tolist() == [8, 9]
        assert test['week'].tolist() == [10]

    def test_default_cutoff_is_week_nine(self):
        train, test = train_test_split_by_week(make_weeks(list(range(1, 19))))

        assert train['week'].max() == 9
        assert test['week'].min() == 10

    def test_out_of_range_weeks_pass_through(self):
        train, test = train_test_split_by_week(make_weeks([0, 5, 19, 22]), 9)

        assert train['week'].tolist() == [0, 5]
        assert test['week'].tolist() == [19, 22]

    def test_deterministic(self, sample):
        first = train_test_split_by_week(clean(sample))
        second = train_test_split_by_week(clean(sample))

        for a, b in zip(first, second):
            pd.testing.assert_frame_equal(a, b)

    def test_empty_dataset(self):
        train, test = train_test_split_by_week(make_weeks([]), 9)
        assert train.empty and test.empty


class TestDataPreprocessor:

    def test_preprocess_then_split(self, sample):
        pre = DataPreprocessor()
        pre.update_config(cutoff_week=12)

        processed = pre.preprocess(sample)
        train, test = pre.split()

        assert pre.raw_data is sample
        assert processed['passing_epa'].notna().all()
        assert train['week'].max() <= 12
        assert test['week'].min() > 12

    def test_split_before_preprocess_raises(self):
        with pytest.raises(ValueError):
            DataPreprocessor().split()
