"""
Unit tests for vendor/model and secret redaction.
"""

import pytest

from aliasgate.redaction import MAX_RECURSION_DEPTH, SENTINEL, redact, redact_string


@pytest.mark.parametrize(
    "term",
    ["openai", "Anthropic", "GOOGLE", "Meta", "mistral", "xAI", "Gemini", "claude",
     "LLaMA", "mixtral", "Whisper", "gpt-4o", "GPT", "o1-mini", "o3"],
)
def test_blocklisted_terms_removed_in_any_case(term):
    """Blocklisted vendor/model names never survive redaction."""
    output = redact_string(f"routed via {term} today")

    assert term.lower() not in output.lower()
    assert output == f"routed via {SENTINEL} today"


def test_secret_patterns_removed():
    """URLs, credential prefixes and known token prefixes are scrubbed."""
    text = (
        "call https://backend.internal/v1/live with api_key=abc123 "
        "and Bearer tok.en-1 using sk-abcdefghijklmnop or github_pat_11AAbb_cc"
    )

    output = redact_string(text)

    assert "https://" not in output
    assert "abc123" not in output
    assert "tok.en-1" not in output
    assert "sk-abcdefghijklmnop" not in output
    assert "github_pat_" not in output


def test_plain_text_untouched():
    assert redact_string("orbit is taking longer than expected") == "orbit is taking longer than expected"


def test_sensitive_keys_masked_regardless_of_value():
    """Values under sensitive keys are replaced wholesale, without recursion."""
    payload = {
        "provider_id": "provider-orbit-primary",
        "Model": {"nested": ["anything"]},
        "endpoint_ref": 42,
        "KEY_REF": None,
        "client_secret": ["a", "b"],
        "input_tokens": 128,
        "region": "eu",
        "deploymentName": True,
        "alias": "orbit-v3.2",
    }

    output = redact(payload)

    for key in payload:
        if key != "alias":
            assert output[key] == SENTINEL
    assert output["alias"] == "orbit-v3.2"


def test_lists_redacted_elementwise_in_order():
    output = redact(["gemini", 1, None, {"token": "x"}, "fine"])

    assert output == [SENTINEL, 1, None, {"token": SENTINEL}, "fine"]


def test_scalars_pass_through():
    assert redact(3.5) == 3.5
    assert redact(True) is True
    assert redact(None) is None


def test_depth_bound_collapses_subtree():
    """Subtrees nested past the bound become the sentinel."""
    value = "leaf"
    for _ in range(MAX_RECURSION_DEPTH + 1):
        value = {"level": value}

    output = redact(value)

    node = output
    for _ in range(MAX_RECURSION_DEPTH):
        node = node["level"]
    assert node["level"] == SENTINEL


def test_realistic_payload_within_depth_bound():
    payload = {"event": {"details": {"errors": [{"message": "openai said no"}]}}}

    output = redact(payload)

    assert output["event"]["details"]["errors"][0]["message"] == f"{SENTINEL} said no"


@pytest.mark.parametrize(
    "value",
    [
        "Authorization: Bearer abc.def meta-gemini o1-gpt",
        {"message": "see https://x.test/a?b=c", "items": ["claude", {"api": "sk-abcdefghijklmnopq"}]},
        [[[[[[["deep"]]]]]]],
        {"a": ("whisper", 2)},
    ],
)
def test_redaction_is_idempotent(value):
    once = redact(value)

    assert redact(once) == once
