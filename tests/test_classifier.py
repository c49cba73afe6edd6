import pytest

from frpc_gui.classifier import StatusHint, SubstringClassifier, classify, detect_level, strip_ansi


@pytest.mark.parametrize("line, hint", [
    ("2024/05/01 10:00:00 [I] [service.go:301] [f3a2] login to server success, get run id [f3a2]",
     StatusHint.RUNNING),
    ("2024/05/01 10:00:00 [I] [service.go:287] try to connect to server...", StatusHint.CONNECTING),
    ("[W] [proxy_wrapper.go:190] [ssh] start error: port already used", StatusHint.FATAL),
    ("[E] [control.go:160] [web] proxy exit with error", StatusHint.FATAL),
    ("[I] [proxy_manager.go:144] proxy added: [ssh]", None),
    ("", None),
])
def test_default_rules(line, hint):
    assert classify(line) == hint


def test_matching_is_case_sensitive():
    assert classify("LOGIN TO SERVER SUCCESS") is None


def test_custom_rules_are_swappable():
    classifier = SubstringClassifier([("tunnel ready", StatusHint.RUNNING)])
    assert classifier.classify("tunnel ready on :6000") == StatusHint.RUNNING
    assert classifier.classify("login to server success") is None


def test_strip_ansi():
    assert strip_ansi("\x1b[1;34m[I]\x1b[0m hello") == "[I] hello"


@pytest.mark.parametrize("line, level", [
    ("2024/05/01 [E] [service.go:1] boom", "error"),
    ("2024/05/01 [W] [service.go:1] careful", "warning"),
    ("2024/05/01 [D] noise", "debug"),
    ("2024/05/01 [I] fine", "info"),
    ("no tag at all", "info"),
])
def test_detect_level(line, level):
    assert detect_level(line) == level


def test_detect_level_default():
    assert detect_level("untagged", default="error") == "error"
