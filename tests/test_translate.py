import unittest

import puyopu64 as pp


class TestDetectVariant(unittest.TestCase):
    def test_given_kana_discriminator_when_detecting_then_pp7(self):
        self.assertIs(pp.detect_variant("いうあ"), pp.PUYO7)
        self.assertIs(pp.detect_variant("あろう"), pp.PUYO7)

    def test_given_ascii_discriminator_when_detecting_then_pppp(self):
        self.assertIs(pp.detect_variant("BCA"), pp.PPPP)
        self.assertIs(pp.detect_variant("A1C"), pp.PPPP)

    def test_given_trailing_whitespace_when_detecting_then_scans_back(self):
        self.assertIs(pp.detect_variant("BCA \n"), pp.PPPP)
        self.assertIs(pp.detect_variant("いうあ\n  "), pp.PUYO7)

    def test_given_fullwidth_pppp_password_when_detecting_then_pppp(self):
        self.assertIs(pp.detect_variant("ＡＡＡ"), pp.PPPP)

    def test_given_non_discriminator_in_both_when_detecting_then_none(self):
        # B is 1 for Puzzle Pop and folds to Ｂ (41) for Puyo Puyo 7
        self.assertIsNone(pp.detect_variant("B"))
        self.assertIsNone(pp.detect_variant("xyz?"))

    def test_given_disqualified_pp7_when_earlier_chars_unknown_then_none(self):
        # か rules out Puyo Puyo 7, Puzzle Pop never sees a char it knows
        self.assertIsNone(pp.detect_variant("いうか"))

    def test_given_no_known_chars_when_detecting_then_none(self):
        self.assertIsNone(pp.detect_variant(""))
        self.assertIsNone(pp.detect_variant("  \n o"))

    def test_given_decodable_passwords_then_detector_agrees(self):
        for variant in pp.VARIANTS.values():
            for seq in ([0] * 40, [1, 2, 0], [5, 9, 2], [1, 63, 1, 30, 2]):
                text = pp.encode(variant, seq)
                self.assertIs(pp.detect_variant(text), variant)


class TestTranslate(unittest.TestCase):
    def test_given_pp7_password_when_translating_then_pppp(self):
        self.assertEqual(pp.translate("いうあ"), "BCA")
        self.assertEqual(pp.translate("あろう"), "A1C")

    def test_given_pppp_plain_password_when_translating_then_pp7_rle(self):
        self.assertEqual(pp.translate("A" * 40), "あろう")
        self.assertEqual(pp.translate("Ａ" * 40), "あろう")

    def test_given_tiny_field_when_translating_then_spaced_output(self):
        self.assertEqual(pp.translate("B" * 95 + "A"), "いＺいむ う")

    def test_given_translation_when_translating_back_then_same_sextets(self):
        for source in ("あろう", "いうあ", "いＺいむ う"):
            there = pp.translate(source)
            back = pp.translate(there)
            self.assertEqual(pp.decode(pp.PUYO7, back), pp.decode(pp.PUYO7, source))

    def test_given_pppp_password_when_translating_twice_then_cells_kept(self):
        source = "A" * 20 + "B" * 20 + "A"
        back = pp.translate(pp.translate(source))
        self.assertEqual(
            pp.get_cells(pp.decode(pp.PPPP, back)),
            pp.get_cells(pp.decode(pp.PPPP, source)),
        )

    def test_given_pasted_password_with_breaks_when_translating_then_same_result(self):
        self.assertEqual(pp.translate("A A A A\n" * 10), pp.translate("A" * 40))

    def test_given_garbage_when_translating_then_unrecognized_password(self):
        with self.assertRaises(pp.UnrecognizedPasswordError):
            pp.translate("xyz?")

    def test_given_garbage_when_translating_for_ui_then_message(self):
        out = pp.translate_or_message("xyz?")
        self.assertEqual(out, "エラー:\n" + pp.MSG_UNRECOGNIZED_PASSWORD)

    def test_given_valid_password_when_translating_for_ui_then_password(self):
        self.assertEqual(pp.translate_or_message("A1C"), "あろう")


class TestDescribe(unittest.TestCase):
    def test_given_pp7_normal_when_describing_then_names(self):
        p = pp.describe("あろう")
        self.assertEqual(p.source, pp.TITLE_PUYO7)
        self.assertEqual(p.target, pp.TITLE_PPPP)
        self.assertIs(p.rule, pp.Rule.NORMAL)

    def test_given_pppp_sun_when_describing_then_puyo20th_target(self):
        p = pp.describe("A" * 43)
        self.assertEqual(p.source, pp.TITLE_PPPP)
        self.assertEqual(p.target, pp.TITLE_PUYO20TH)
        self.assertIs(p.rule, pp.Rule.SUN)

    def test_given_unknown_field_size_when_describing_then_unrecognized_rule(self):
        with self.assertRaises(pp.UnrecognizedRuleError):
            pp.describe("BCA")

    def test_given_garbage_when_describing_then_unrecognized_password(self):
        with self.assertRaises(pp.UnrecognizedPasswordError):
            pp.describe("いうか")


if __name__ == "__main__":
    unittest.main()
