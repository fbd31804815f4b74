from ethkit.version import VERSION, get_version


def test_default_version():
    assert get_version() == "0.1.3"
    assert get_version() == VERSION


def test_release_ignores_commit():
    assert get_version("1.0.0", "", "abc123") == "1.0.0"


def test_prerelease_without_commit():
    assert get_version("1.0.0", "rc1", "") == "1.0.0-rc1"


def test_prerelease_with_commit():
    assert get_version("1.0.0", "rc1", "abc123") == "1.0.0-rc1 (abc123)"


def test_prerelease_text_starts_with_version():
    text = get_version("2.3.4", "dev", "deadbeef")
    assert text.startswith("2.3.4-dev")
    assert text.endswith("(deadbeef)")