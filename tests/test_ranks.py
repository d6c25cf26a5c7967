import unittest

from domain.models import ProfileAttributes
from domain.ranks import (
    NEUTRAL_GRAY,
    RankKind,
    classify_level,
    classify_rank,
    resolve_rank_source,
)


class ClassifyLevelTests(unittest.TestCase):
    def test_zero_experience_is_level_one(self):
        # floor(sqrt(30625) / 50 - 2.5) = floor(175 / 50 - 2.5) = 1
        self.assertEqual(classify_level(0), 1)

    def test_missing_experience_counts_as_zero(self):
        self.assertEqual(classify_level(None), 1)

    def test_level_boundary(self):
        self.assertEqual(classify_level(9999), 1)
        self.assertEqual(classify_level(10000), 2)

    def test_negative_experience_is_not_clamped(self):
        self.assertEqual(classify_level(-100), 0)

    def test_monotonic(self):
        previous = classify_level(0)
        for exp in range(0, 5_000_000, 7919):
            level = classify_level(exp)
            self.assertGreaterEqual(level, previous)
            previous = level


class ClassifyRankTests(unittest.TestCase):
    def test_special_rank_beats_monthly(self):
        attrs = ProfileAttributes(rank="ADMIN", monthly_package_rank="SUPERSTAR")
        rank = classify_rank(attrs)
        self.assertEqual(rank.label, "ADMIN")
        self.assertEqual(rank.primary_color, "#FF5555")

    def test_no_rank_falls_back_to_non_rank(self):
        attrs = ProfileAttributes.from_payload(
            {"rank": "NORMAL", "monthlyPackageRank": "NONE", "newPackageRank": None}
        )
        rank = classify_rank(attrs)
        self.assertEqual(rank.label, "Non-Rank")
        self.assertEqual(rank.primary_color, NEUTRAL_GRAY)

    def test_superstar_monthly_rank(self):
        rank = classify_rank(ProfileAttributes(monthly_package_rank="SUPERSTAR"))
        self.assertEqual(rank.label, "MVP++")
        self.assertEqual(rank.accent_color, "#FFAA00")

    def test_monthly_beats_purchased(self):
        attrs = ProfileAttributes(monthly_package_rank="MVP_PLUS", new_package_rank="VIP")
        self.assertEqual(classify_rank(attrs).label, "MVP+")

    def test_purchased_rank(self):
        rank = classify_rank(ProfileAttributes(new_package_rank="VIP_PLUS"))
        self.assertEqual(rank.label, "VIP+")
        self.assertEqual(rank.accent_color, "#00AA00")

    def test_unknown_tag_uses_tag_as_label(self):
        rank = classify_rank(ProfileAttributes(rank="PIG+++"))
        self.assertEqual(rank.label, "PIG+++")
        self.assertEqual(rank.primary_color, NEUTRAL_GRAY)
        self.assertEqual(rank.accent_color, NEUTRAL_GRAY)

    def test_plus_color_from_palette_name(self):
        attrs = ProfileAttributes(new_package_rank="MVP_PLUS", rank_plus_color="RED")
        self.assertEqual(classify_rank(attrs).accent_color, "#FF5555")

    def test_rank_source_kinds(self):
        self.assertIs(resolve_rank_source(ProfileAttributes(rank="YOUTUBER")).kind, RankKind.SPECIAL)
        self.assertIs(
            resolve_rank_source(ProfileAttributes(monthly_package_rank="SUPERSTAR")).kind,
            RankKind.MONTHLY,
        )
        self.assertIs(resolve_rank_source(ProfileAttributes(new_package_rank="MVP")).kind, RankKind.PURCHASED)
        self.assertIs(resolve_rank_source(ProfileAttributes()).kind, RankKind.NONE)


class ProfileAttributesTests(unittest.TestCase):
    def test_from_payload_reads_discord_link(self):
        attrs = ProfileAttributes.from_payload(
            {
                "networkExp": 12345.5,
                "socialMedia": {"links": {"DISCORD": "steve"}},
            }
        )
        self.assertEqual(attrs.linked_accounts, {"DISCORD": "steve"})
        self.assertEqual(attrs.network_exp, 12345.5)
        self.assertEqual(attrs.rank, "NORMAL")
        self.assertEqual(attrs.monthly_package_rank, "NONE")

    def test_from_payload_without_social_media(self):
        self.assertEqual(ProfileAttributes.from_payload({}).linked_accounts, {})


if __name__ == "__main__":
    unittest.main()
