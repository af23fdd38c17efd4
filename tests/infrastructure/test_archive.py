"""Tests for tarball helpers."""

import pytest

from conftest import FakeRunner
from debapps.exceptions import CommandError
from debapps.infrastructure.archive import (
    extract_tarball,
    tar_flags,
    tarball_suffix,
)


class TestSuffixes:
    """Test compression detection."""

    @pytest.mark.parametrize(
        ("url", "suffix"),
        [
            ("https://x/tor-browser-14.0.4.tar.xz", ".tar.xz"),
            ("https://x/app.tar.bz2", ".tar.bz2"),
            ("https://x/app.tgz", ".tar.gz"),
            ("https://x/app.tar.gz?download=1", ".tar.gz"),
            ("https://x/download", ".tar.gz"),
        ],
    )
    def test_tarball_suffix(self, url, suffix):
        assert tarball_suffix(url) == suffix

    @pytest.mark.parametrize(
        ("name", "flags"),
        [
            ("a.tar.xz", "xJf"),
            ("a.tar.bz2", "xjf"),
            ("a.tar.gz", "xzf"),
            ("a.tgz", "xzf"),
            ("a", "xzf"),
        ],
    )
    def test_tar_flags(self, name, flags):
        assert tar_flags(name) == flags


class TestExtract:
    """Test the tar invocation."""

    @pytest.mark.asyncio
    async def test_extract_with_strip(self, tmp_path):
        runner = FakeRunner()
        tarball = tmp_path / "app.tar.xz"
        dest = tmp_path / "out"

        await extract_tarball(runner, tarball, dest, strip_components=1)

        assert dest.is_dir()
        assert runner.calls == [
            (
                "tar",
                "-xJf",
                str(tarball),
                "-C",
                str(dest),
                "--strip-components=1",
            )
        ]

    @pytest.mark.asyncio
    async def test_tar_failure(self, tmp_path):
        runner = FakeRunner()
        runner.on("tar", returncode=2, stderr="not in gzip format")

        with pytest.raises(CommandError, match="gzip"):
            await extract_tarball(runner, tmp_path / "a.tar.gz", tmp_path)
