"""Commit metadata returned by the GitHub git-commits endpoint."""

from __future__ import annotations

import msgspec


class GitIdentity(msgspec.Struct, kw_only=True, frozen=True):
    """Name and email of a commit author or committer."""

    name: str = ""
    email: str = ""


class CommitInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Commit metadata used to enrich build notifications.

    Every field defaults to an empty value, so ``CommitInfo()`` is the
    placeholder used when enrichment fails.

    Attributes
    ----------
    message : str
        Full commit message.
    html_url : str
        Browser URL of the commit.
    author : GitIdentity
        Commit author.
    committer : GitIdentity
        Commit committer.

    """

    message: str = ""
    html_url: str = ""
    author: GitIdentity = msgspec.field(default_factory=GitIdentity)
    committer: GitIdentity = msgspec.field(default_factory=GitIdentity)
