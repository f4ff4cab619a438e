"""Tests for at-directive resolution."""

import pytest
from structlog.testing import capture_logs

from fluxtalk.dingtalk.mention import MentionKind, MentionTarget, resolve_mention


class TestResolveMention:
    @pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
    def test_blank_mentions_nobody(self, raw):
        assert resolve_mention(raw) == MentionTarget.none()

    @pytest.mark.parametrize("raw", ["all", "ALL", "All", "  aLl  "])
    def test_all_any_case(self, raw):
        assert resolve_mention(raw).kind == MentionKind.ALL

    def test_specific_numbers(self):
        target = resolve_mention("a b c")
        assert target.kind == MentionKind.SPECIFIC
        assert target.mobiles == ("a", "b", "c")

    def test_single_number_with_padding(self):
        target = resolve_mention("  13800000000 ")
        assert target.mobiles == ("13800000000",)

    def test_all_mixed_with_numbers_is_rejected(self):
        with capture_logs() as logs:
            target = resolve_mention("all foo")
        assert target == MentionTarget.none()
        assert logs[0]["event"] == "mention_directive_mixed_all"
        assert logs[0]["log_level"] == "warning"

    def test_all_inside_token_is_rejected(self):
        assert resolve_mention("138 ballpark").kind == MentionKind.NONE

    def test_double_space_is_rejected(self):
        with capture_logs() as logs:
            target = resolve_mention("a  b")
        assert target == MentionTarget.none()
        assert logs[0]["event"] == "mention_directive_double_space"
        assert logs[0]["log_level"] == "warning"


class TestMentionTarget:
    def test_specific_requires_identifiers(self):
        with pytest.raises(ValueError):
            MentionTarget.specific([])

    def test_none_cannot_carry_identifiers(self):
        with pytest.raises(ValueError):
            MentionTarget(MentionKind.NONE, ("138",))

    def test_payload_for_all(self):
        assert MentionTarget.all().to_payload() == {
            "atMobiles": [],
            "atUserIds": [],
            "isAtAll": True,
        }

    def test_payload_for_specific(self):
        payload = MentionTarget.specific(["138", "139"]).to_payload()
        assert payload["atMobiles"] == ["138", "139"]
        assert payload["isAtAll"] is False

    def test_text_suffix(self):
        assert MentionTarget.specific(["138", "139"]).text_suffix() == "@138 @139"
        assert MentionTarget.all().text_suffix() == ""
        assert MentionTarget.none().text_suffix() == ""
