import hashlib

import pytest

from sandoc.core.identifiers import content_digest, derive_identity


def test_digest_is_seven_lowercase_hex_characters() -> None:
    digest = content_digest("var x = 1;")

    assert digest == hashlib.md5(b"var x = 1;").hexdigest()[:7]
    assert len(digest) == 7
    assert digest == digest.lower()


def test_digest_is_stable_for_identical_text() -> None:
    assert content_digest("") == "d41d8cd"
    assert content_digest("same") == content_digest("same")
    assert content_digest("same") != content_digest("other")


def test_identity_names_follow_counter_and_digest() -> None:
    identity = derive_identity(3, "var x = 1;", "/docs/button.md")
    digest = content_digest("var x = 1;")

    assert identity.id == f"3_{digest}"
    assert identity.tag_name == f"preview-block-3-{digest}"
    assert identity.entry_var == f"PreviewBlock3_{digest}"
    assert identity.entry_key == f"PreviewBlock3_{digest}.vpms"
    assert identity.component_key == f"Component3_{digest}.vpms"
    assert identity.entry_request == f"/docs/button.md.PreviewBlock3_{digest}.vpms"
    assert identity.component_request == f"/docs/button.md.Component3_{digest}.vpms"


def test_counter_must_be_positive() -> None:
    with pytest.raises(ValueError):
        derive_identity(0, "code", "/docs/x.md")
