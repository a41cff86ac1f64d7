"""Tests for the joblib snapshot helpers."""
import sys
import os

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from qb_epa_analysis.data.loader import DataLoader
from qb_epa_analysis.data.preprocessor import clean, train_test_split_by_week
from qb_epa_analysis.models.linear_suite import LinearModelSuite
from qb_epa_analysis.utils.model_utils import get_model_metadata, load_models, save_models

SAMPLE_FILE = os.path.join(os.path.dirname(__file__), 'data', 'qb_weeks_sample.csv')


@pytest.fixture(scope='module')
def split():
    df = clean(DataLoader().load_player_stats(SAMPLE_FILE))
    return train_test_split_by_week(df, 9)


def test_snapshot_round_trip(tmp_path, split):
    train, test = split
    models = LinearModelSuite().fit_all(train)

    path = save_models(models, tmp_path / 'snap' / 'models.joblib', meta={'cutoff_week': 9})
    restored = load_models(path)

    assert list(restored) == list(models)
    for name, model in models.items():
        assert restored[name].predictors == model.predictors
        assert restored[name].residual_std_error == model.residual_std_error
        np.testing.assert_array_equal(
            restored[name].coefficients.to_numpy(), model.coefficients.to_numpy()
        )
        np.testing.assert_array_equal(restored[name].predict(test), model.predict(test))


def test_metadata(tmp_path, split):
    models = LinearModelSuite().fit_all(split[0])
    path = save_models(models, tmp_path / 'models.joblib', meta={'cutoff_week': 9})

    meta = get_model_metadata(path)

    assert meta['models'] == list(models)
    assert meta['cutoff_week'] == 9
    assert meta['n_obs']['all'] == len(split[0])
    assert len(meta['coefficients_hash']) == 8


def test_metadata_missing_is_empty(tmp_path):
    assert get_model_metadata(tmp_path / 'absent.joblib') == {}


def test_load_missing_snapshot(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_models(tmp_path / 'absent.joblib')
