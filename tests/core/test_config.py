"""
Tests for buckets and simulation configuration.
"""

import numpy as np
import pytest

from drawdownlab.core.buckets import (
    DEFAULT_BUCKETS,
    DEFAULT_CORRELATION_MATRIX,
    Bucket,
    allocation_total,
    initial_balances,
    validate_allocations,
)
from drawdownlab.core.config import (
    LAKH,
    SimulationConfig,
    WithdrawalMode,
    from_lakh,
    to_lakh,
)
from drawdownlab.core.errors import ConfigurationError, DecompositionError


class TestBuckets:
    """Test bucket helpers."""

    def test_default_allocations_total_100(self):
        assert allocation_total(DEFAULT_BUCKETS) == 100.0
        validate_allocations(DEFAULT_BUCKETS)

    @pytest.mark.parametrize("second", [49.5, 49.6, 50.0, 50.4])
    def test_rounding_to_100_is_accepted(self, second):
        validate_allocations([Bucket("a", 50, 0, 0), Bucket("b", second, 0, 0)])

    @pytest.mark.parametrize("second", [49.4, 50.5, 50.6, 0.0])
    def test_rounding_away_from_100_is_rejected(self, second):
        with pytest.raises(ConfigurationError):
            validate_allocations([Bucket("a", 50, 0, 0), Bucket("b", second, 0, 0)])

    def test_initial_balances(self):
        buckets = [Bucket("a", 5, 0, 0), Bucket("b", 95, 0, 0)]

        assert initial_balances(buckets, 1_000_000) == (50_000.0, 950_000.0)

    def test_bucket_from_dict_missing_field(self):
        with pytest.raises(ConfigurationError, match="volatility_pct"):
            Bucket.from_dict({"name": "x", "allocation_pct": 10, "avg_return_pct": 1})


class TestSimulationConfig:
    """Test configuration defaults, validation and serialization."""

    def test_defaults(self):
        cfg = SimulationConfig()

        assert cfg.starting_corpus == 200 * LAKH
        assert cfg.first_year_expense == 3 * LAKH
        assert cfg.inflation_rate == 0.06
        assert cfg.mode is WithdrawalMode.AUTO
        assert cfg.bucket_names[0] == "Liquid Funds"
        assert np.array_equal(cfg.correlation_matrix, DEFAULT_CORRELATION_MATRIX)
        cfg.validate()

    def test_matrix_is_read_only(self):
        cfg = SimulationConfig()

        with pytest.raises(ValueError):
            cfg.correlation_matrix[0, 1] = 0.9

    def test_mode_parsed_from_string(self):
        assert SimulationConfig(mode="Manual").mode is WithdrawalMode.MANUAL

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError, match="Unknown withdrawal mode"):
            SimulationConfig(mode="sometimes")

    def test_expense_for_year(self):
        cfg = SimulationConfig(first_year_expense=100.0, inflation_rate=0.05)

        assert cfg.expense_for_year(0) == 100.0
        assert cfg.expense_for_year(2) == pytest.approx(110.25)

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"buckets": ()}, "At least one bucket"),
            (
                {
                    "buckets": (Bucket("a", 50, 0, 1), Bucket("a", 50, 0, 1)),
                    "correlation_matrix": np.eye(2),
                },
                "unique",
            ),
            (
                {
                    "buckets": (Bucket("a", 50, 0, -1), Bucket("b", 50, 0, 1)),
                    "correlation_matrix": np.eye(2),
                },
                "volatility_pct",
            ),
            ({"starting_corpus": -1.0}, "starting_corpus"),
            ({"first_year_expense": -5.0}, "first_year_expense"),
            ({"inflation_rate": -1.0}, "inflation_rate"),
        ],
    )
    def test_validate_rejects(self, kwargs, message):
        with pytest.raises(ConfigurationError, match=message):
            SimulationConfig(**kwargs).validate()

    def test_validate_matrix_size(self):
        cfg = SimulationConfig(correlation_matrix=np.eye(4))

        with pytest.raises(DecompositionError):
            cfg.validate()

    def test_dict_round_trip(self):
        cfg = SimulationConfig(mode=WithdrawalMode.MANUAL, inflation_rate=0.04)

        restored = SimulationConfig.from_dict(cfg.to_dict())

        assert restored == cfg
        assert np.array_equal(restored.correlation_matrix, cfg.correlation_matrix)

    def test_from_dict_partial_uses_defaults(self):
        cfg = SimulationConfig.from_dict({"starting_corpus": 5_000_000, "mode": "manual"})

        assert cfg.starting_corpus == 5_000_000.0
        assert cfg.mode is WithdrawalMode.MANUAL
        assert cfg.buckets == DEFAULT_BUCKETS

    def test_from_dict_requires_matrix_for_custom_bucket_count(self):
        data = {
            "buckets": [
                {"name": "a", "allocation_pct": 50, "avg_return_pct": 4, "volatility_pct": 1},
                {"name": "b", "allocation_pct": 50, "avg_return_pct": 9, "volatility_pct": 12},
            ]
        }

        with pytest.raises(ConfigurationError, match="correlation_matrix"):
            SimulationConfig.from_dict(data)

    def test_from_dict_bad_number(self):
        with pytest.raises(ConfigurationError, match="starting_corpus"):
            SimulationConfig.from_dict({"starting_corpus": "lots"})


def test_lakh_helpers():
    assert to_lakh(2_500_000) == 25.0
    assert from_lakh(0.6) == pytest.approx(60_000.0)
