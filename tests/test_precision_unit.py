# User value: This test validates the price-band tracker so users get calibrated, never-collapsing estimates.
import copy
import math
import random
import unittest

from schemas.precision import LabelStats, PrecisionModel
from services.precision import (
    PrecisionConfig,
    quantile_step,
    round_half_up,
    tighten,
    update,
)


def _warm_model(label: str, q_low: float, q_high: float, mean: float | None = None) -> PrecisionModel:
    model = PrecisionModel()
    model.labels[label] = LabelStats(n=5, q_low=q_low, q_high=q_high, mean=mean if mean is not None else q_low)
    return model


class QuantileStepUnitTests(unittest.TestCase):
    def test_cold_estimate_takes_observation(self):
        self.assertEqual(quantile_step(None, 0.2, 500, 0.12), 500.0)

    # User value: a price above the estimate raises it by the target weight so bands follow real prices.
    def test_observation_above_moves_estimate_up(self):
        self.assertAlmostEqual(quantile_step(500.0, 0.2, 600, 0.12), 502.4)
        self.assertAlmostEqual(quantile_step(500.0, 0.8, 600, 0.12), 509.6)

    # User value: a price below the estimate lowers it by the complementary weight.
    def test_observation_below_moves_estimate_down(self):
        self.assertAlmostEqual(quantile_step(500.0, 0.2, 400, 0.12), 490.4)
        self.assertAlmostEqual(quantile_step(500.0, 0.8, 400, 0.12), 497.6)

    def test_step_has_unit_floor_for_close_observations(self):
        self.assertAlmostEqual(quantile_step(500.0, 0.2, 500.5, 0.12), 500.024)
        self.assertAlmostEqual(quantile_step(500.0, 0.2, 500.0, 0.12), 500.024)


class PrecisionUpdateUnitTests(unittest.TestCase):
    # User value: the first verified price defines the band exactly so new categories start sensibly.
    def test_first_observation_is_exact(self):
        model = update(PrecisionModel(), "X", 500)
        stats = model.labels["X"]
        self.assertEqual(stats.n, 1)
        self.assertEqual(stats.q_low, 500)
        self.assertEqual(stats.q_high, 500)
        self.assertEqual(stats.mean, 500)

    def test_second_observation_updates_all_fields(self):
        model = PrecisionModel()
        update(model, "X", 500)
        update(model, "X", 600)
        stats = model.labels["X"]
        self.assertEqual(stats.n, 2)
        self.assertAlmostEqual(stats.q_low, 502.4)
        self.assertAlmostEqual(stats.q_high, 509.6)
        self.assertAlmostEqual(stats.mean, 503.0)

    def test_update_mutates_and_returns_same_model(self):
        model = PrecisionModel()
        self.assertIs(update(model, "X", 10), model)

    # User value: NaN, infinite or non-numeric prices never disturb what was already learned.
    def test_non_finite_prices_are_ignored(self):
        model = update(PrecisionModel(), "X", 250)
        before = copy.deepcopy(model.to_document())
        for bad in (math.nan, math.inf, -math.inf, None, "100", True):
            out = update(model, "X", bad)
            self.assertIs(out, model)
        self.assertEqual(model.to_document(), before)
        self.assertEqual(model.labels["X"].n, 1)

    def test_non_finite_price_does_not_create_label(self):
        model = update(PrecisionModel(), "Y", math.nan)
        self.assertNotIn("Y", model.labels)

    # User value: uncategorized prices still count, pooled under the General category.
    def test_empty_and_missing_labels_resolve_to_general(self):
        model = PrecisionModel()
        update(model, "", 100)
        update(model, None, 100)
        self.assertEqual(list(model.labels), ["General"])
        self.assertEqual(model.labels["General"].n, 2)

    def test_labels_are_case_sensitive(self):
        model = PrecisionModel()
        update(model, "tree trim", 100)
        update(model, "Tree Trim", 300)
        self.assertEqual(model.labels["tree trim"].q_low, 100)
        self.assertEqual(model.labels["Tree Trim"].q_low, 300)

    def test_custom_config_is_respected(self):
        cfg = PrecisionConfig(q_low=0.1, q_high=0.9, alpha=0.5, blend=0.5)
        model = PrecisionModel()
        update(model, "X", 100, cfg)
        update(model, "X", 200, cfg)
        self.assertAlmostEqual(model.labels["X"].q_low, 100 + 0.5 * 0.1 * 100)
        self.assertAlmostEqual(model.labels["X"].q_high, 100 + 0.5 * 0.9 * 100)

    # User value: estimates drift toward the real low/high prices of a category as data accumulates.
    def test_tracker_moves_toward_target_quantiles(self):
        finals_low = []
        finals_high = []
        for seed in range(20):
            rng = random.Random(seed)
            model = PrecisionModel()
            for _ in range(200):
                update(model, "Test", rng.uniform(100, 200))
            stats = model.labels["Test"]
            self.assertEqual(stats.n, 200)
            self.assertGreaterEqual(stats.q_low, 100)
            self.assertLessEqual(stats.q_high, 200)
            self.assertLess(stats.q_low, stats.q_high)
            finals_low.append(stats.q_low)
            finals_high.append(stats.q_high)

        avg_low = sum(finals_low) / len(finals_low)
        avg_high = sum(finals_high) / len(finals_high)
        self.assertGreaterEqual(avg_low, 100)
        self.assertLessEqual(avg_low, 140)
        self.assertGreaterEqual(avg_high, 160)
        self.assertLessEqual(avg_high, 200)


class PrecisionTightenUnitTests(unittest.TestCase):
    # User value: with no learned prices, users see the AI range exactly as produced.
    def test_cold_label_passes_through(self):
        model = PrecisionModel()
        for low, high in ((0, 1), (50, 400), (120.5, 121.0)):
            self.assertEqual(tighten(model, "Unseen", low, high), {"low": low, "high": high})
        self.assertEqual(tighten(model, None, 10, 20), {"low": 10, "high": 20})

    def test_tighten_does_not_resolve_general(self):
        model = update(PrecisionModel(), None, 500)
        self.assertEqual(tighten(model, "", 10, 20), {"low": 10, "high": 20})

    def test_half_cold_stats_pass_through(self):
        model = PrecisionModel()
        model.labels["X"] = LabelStats(n=0, q_low=100.0, q_high=None)
        self.assertEqual(tighten(model, "X", 10, 20), {"low": 10, "high": 20})

    # User value: the blended band matches the documented weighting exactly.
    def test_blend_literal(self):
        model = _warm_model("X", 100.4, 299.6)
        self.assertEqual(tighten(model, "X", 50, 400), {"low": 80, "high": 340})

    def test_crossed_quantiles_are_clamped(self):
        model = _warm_model("X", 900.0, 100.0)
        self.assertEqual(tighten(model, "X", 100, 200), {"low": 139, "high": 140})

    def test_tied_blend_is_split(self):
        model = _warm_model("X", 200.0, 200.0)
        out = tighten(model, "X", 100, 101)
        self.assertEqual(out, {"low": 159, "high": 160})

    def test_non_finite_state_passes_through(self):
        model = _warm_model("X", math.inf, 300.0)
        self.assertEqual(tighten(model, "X", 10, 20), {"low": 10, "high": 20})

    def test_tighten_is_pure(self):
        model = _warm_model("X", 100.0, 300.0)
        before = copy.deepcopy(model.to_document())
        tighten(model, "X", 50, 400)
        self.assertEqual(model.to_document(), before)

    def test_mean_does_not_affect_band(self):
        a = _warm_model("X", 100.0, 300.0, mean=10.0)
        b = _warm_model("X", 100.0, 300.0, mean=9000.0)
        self.assertEqual(tighten(a, "X", 50, 400), tighten(b, "X", 50, 400))

    # User value: whatever prices were learned, users never see an empty or inverted band.
    def test_band_is_never_degenerate(self):
        rng = random.Random(42)
        for _ in range(60):
            model = PrecisionModel()
            for _ in range(rng.randint(1, 40)):
                kind = rng.random()
                if kind < 0.1:
                    price = rng.choice((1e6, -1e6, 0, 1))
                elif kind < 0.2:
                    price = rng.choice((math.nan, math.inf))
                else:
                    price = rng.uniform(0, 2000)
                update(model, "X", price)
            for _ in range(10):
                ai_low = rng.uniform(-100, 5000)
                ai_high = ai_low + rng.uniform(0.001, 3000)
                out = tighten(model, "X", ai_low, ai_high)
                self.assertLess(out["low"], out["high"])

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(-2.5), -2)
        self.assertEqual(round_half_up(0.49), 0)
        self.assertEqual(round_half_up(339.5), 340)


if __name__ == "__main__":
    unittest.main()
