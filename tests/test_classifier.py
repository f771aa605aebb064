"""Tests for the chat line classifier."""

import pytest

from aion_notifier.classifier import (
    DARK_GRAY,
    LIGHT_GREEN,
    LIGHT_RED,
    SIENNA,
    Channel,
    Classification,
    LineClassifier,
    Rule,
)


@pytest.fixture
def classifier():
    return LineClassifier()


class TestDefaultRules:
    """Test the built-in channel rules."""

    def test_lfg_line(self, classifier):
        line = "2021.03.14 14:22:10 : [3.LFG] [charname:Bob;1.0000 0.6941 0.6941]: need healer"
        result = classifier.classify(line)
        assert result.channel == Channel.LFG
        assert result.color == LIGHT_RED

    def test_incoming_whisper(self, classifier):
        line = "2021.03.14 14:22:10 : [charname:Alice;0.6275 1.0000 0.6275] Whispers: hi"
        result = classifier.classify(line)
        assert result.channel == Channel.PM
        assert result.color == LIGHT_GREEN

    def test_outgoing_whisper(self, classifier):
        line = "2021.03.14 14:22:10 : You Whisper to [charname:Alice;0.6275 1.0000 0.6275]: yo"
        result = classifier.classify(line)
        assert result.channel == Channel.PM
        assert result.color == LIGHT_GREEN

    def test_shout_is_colored_but_unrouted(self, classifier):
        line = '2021.03.14 14:22:10 : You shout "WTS stigma"'
        result = classifier.classify(line)
        assert result.channel is None
        assert result.color == SIENNA

    def test_default(self, classifier):
        result = classifier.classify("2021.03.14 14:22:10 : You have gained 120 XP.")
        assert result == Classification(channel=None, color=DARK_GRAY)

    def test_empty_line(self, classifier):
        assert classifier.classify("").channel is None


class TestRuleOrder:
    """Rules overlap; the first one listed wins."""

    def test_lfg_beats_whisper(self, classifier):
        line = "14:22:10 : [charname:Bob;1] Whispers: saw you in [3.LFG] [charname:Bob;1]"
        assert classifier.classify(line).channel == Channel.LFG

    def test_whisper_beats_shout(self, classifier):
        line = '14:22:10 : You Whisper to [charname:Bob;1]: You shout "x"'
        assert classifier.classify(line).channel == Channel.PM

    def test_custom_rules(self):
        classifier = LineClassifier(rules=(Rule(("hello",), Channel.PM, SIENNA),))
        assert classifier.classify("hello there") == Classification(Channel.PM, SIENNA)
        assert classifier.classify("[3.LFG] x").channel is None

    def test_rule_cannot_target_all(self):
        with pytest.raises(ValueError):
            LineClassifier(rules=(Rule(("x",), Channel.ALL, SIENNA),))


class TestChannel:
    """Test channel set."""

    def test_only_all_is_catch_all(self):
        assert [c for c in Channel if c.is_catch_all] == [Channel.ALL]

    def test_color_hex(self):
        assert LIGHT_RED.hex == "#FFB0B0"
        assert LIGHT_GREEN.hex == "#A0FFA0"
