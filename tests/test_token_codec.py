import re
from hashlib import sha256

from codexi.utils.token_codec import (
    TOKEN_ALPHABET,
    fingerprint_token,
    generate_token,
    has_token_prefix,
    mask_token,
)

TOKEN_RE = re.compile(r"^CXI_[A-Za-z0-9]{32}$")


def test_generated_token_shape():
    token = generate_token()
    assert TOKEN_RE.match(token)
    assert set(token[4:]) <= set(TOKEN_ALPHABET)


def test_generated_tokens_differ():
    assert len({generate_token() for _ in range(50)}) == 50


def test_fingerprint_is_deterministic_sha256_hex():
    token = generate_token()
    first = fingerprint_token(token)
    assert first == fingerprint_token(token)
    assert first == sha256(token.encode("utf-8")).hexdigest()
    assert re.fullmatch(r"[0-9a-f]{64}", first)


def test_fingerprint_known_value():
    # sha256("CXI_test")
    assert fingerprint_token("CXI_test") == sha256(b"CXI_test").hexdigest()
    assert fingerprint_token("CXI_test") != fingerprint_token("CXI_Test")


def test_mask_shows_first_eight_chars():
    assert mask_token("CXI_abcdEFGH1234") == "CXI_abcd..."


def test_prefix_check():
    assert has_token_prefix("CXI_abc")
    assert not has_token_prefix("cxi_abc")
    assert not has_token_prefix("d2_abc")
    assert not has_token_prefix(None)
    assert not has_token_prefix(42)
