"""Version information of the command line tool."""

from __future__ import annotations

VERSION = "0.1.3"
"""The main version."""

VERSION_PRERELEASE = ""
"""A marker for the version, such as ``dev`` or ``rc1``; empty for releases."""

GIT_COMMIT = ""
"""The commit the tool was built from, when known."""


def get_version(
    version: str = VERSION,
    prerelease: str = VERSION_PRERELEASE,
    git_commit: str = GIT_COMMIT,
) -> str:
    """Return the version text; the commit is shown only for prereleases."""
    text = version
    if prerelease:
        text += f"-{prerelease}"
        if git_commit:
            text += f" ({git_commit})"
    return text