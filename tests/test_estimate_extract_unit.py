# User value: This test validates budget extraction so spoken/typed budgets still teach the price model.
import unittest

from services.estimate_extract import extract_fields
from services.inference_stub import STUB_LABELS, infer_from_media


class EstimateExtractUnitTests(unittest.TestCase):
    def test_budget_with_dollar_sign(self):
        self.assertEqual(extract_fields("Need sod, $300 budget")["budget_hint_usd"], 300)

    def test_budget_in_words(self):
        self.assertEqual(extract_fields("Can spend 75 bucks")["budget_hint_usd"], 75)

    def test_single_digit_amount_is_ignored(self):
        self.assertIsNone(extract_fields("5 dollars")["budget_hint_usd"])

    def test_irrigation_keywords_set_label(self):
        self.assertEqual(extract_fields("Sprinkler head is leaking")["label"], "Irrigation Repair")
        self.assertEqual(extract_fields("Trim the hedge")["label"], "General Repair")

    def test_empty_text(self):
        self.assertEqual(extract_fields(None), {"budget_hint_usd": None, "label": "General Repair"})


class InferenceStubUnitTests(unittest.TestCase):
    # User value: the same upload name always yields the same starting range.
    def test_stub_is_deterministic(self):
        self.assertEqual(infer_from_media("/tmp/c_1.jpg"), infer_from_media("c_1.jpg"))

    def test_empty_name_uses_default_seed(self):
        out = infer_from_media("")
        self.assertEqual((out["ai_low"], out["ai_high"], out["label"]), (257, 464, "Tree Trim"))

    def test_stub_range_is_ordered(self):
        for name in ("a.jpg", "b.png", "c_0123.mp4", "yard photo.webp"):
            out = infer_from_media(name)
            self.assertLess(out["ai_low"], out["ai_high"])
            self.assertIn(out["label"], STUB_LABELS)


if __name__ == "__main__":
    unittest.main()
