"""Stable identifiers and artifact keys for preview blocks."""

from __future__ import annotations

from dataclasses import dataclass
import hashlib


ARTIFACT_SUFFIX = "vpms"
DIGEST_LENGTH = 7


def content_digest(text: str) -> str:
    """Return the first seven hex characters of the MD5 digest of ``text``."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]


@dataclass(frozen=True, slots=True)
class BlockIdentity:
    """Names derived for one preview block."""

    counter: int
    digest: str
    filepath: str

    @property
    def id(self) -> str:
        return f"{self.counter}_{self.digest}"

    @property
    def tag_name(self) -> str:
        return f"preview-block-{self.counter}-{self.digest}"

    @property
    def entry_var(self) -> str:
        return f"PreviewBlock{self.id}"

    @property
    def entry_key(self) -> str:
        return f"{self.entry_var}.{ARTIFACT_SUFFIX}"

    @property
    def component_key(self) -> str:
        return f"Component{self.id}.{ARTIFACT_SUFFIX}"

    @property
    def entry_request(self) -> str:
        return f"{self.filepath}.{self.entry_key}"

    @property
    def component_request(self) -> str:
        return f"{self.filepath}.{self.component_key}"


def derive_identity(counter: int, code: str, filepath: str) -> BlockIdentity:
    """Derive the identity of the preview block at ``counter`` from its raw code."""
    if counter < 1:
        raise ValueError(f"Preview block counter must start at 1, got {counter}")
    return BlockIdentity(counter=counter, digest=content_digest(code), filepath=filepath)


__all__ = [
    "ARTIFACT_SUFFIX",
    "BlockIdentity",
    "DIGEST_LENGTH",
    "content_digest",
    "derive_identity",
]
