from fanout.utils import is_sensitive_header, mask_headers, token_fingerprint


def test_token_fingerprint_hides_value():
    fingerprint = token_fingerprint("super-secret-token")

    assert "super-secret-token" not in fingerprint
    assert fingerprint.startswith("len=18 sha256=")
    assert fingerprint == token_fingerprint("super-secret-token")


def test_token_fingerprint_empty():
    assert token_fingerprint("") == "<empty>"
    assert token_fingerprint(None) == "<empty>"


def test_sensitive_header_names():
    assert is_sensitive_header("Authorization")
    assert is_sensitive_header("X-Api-Key")
    assert is_sensitive_header("X-Auth-Request-Access-Token")
    assert not is_sensitive_header("Accept")


def test_mask_headers_only_masks_credentials():
    masked = mask_headers([("Authorization", "Bearer abc"), ("Accept", "*/*")])

    assert masked["Accept"] == "*/*"
    assert "Bearer abc" not in masked["Authorization"]
