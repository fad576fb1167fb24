"""Tests for terser-based minification."""

import subprocess

import pytest

from tsbundle.core.errors import MinificationError
from tsbundle.core.minification import TerserMinifier, ecma_version


@pytest.mark.parametrize(
    "target, expected",
    [("ES3", 5), ("ES5", 5), ("es6", 2015), ("ES2015", 2015), ("ES2017", 2017), ("ES2022", 2020), ("ESNext", 2020)],
)
def test_ecma_version(target: str, expected: int) -> None:
    assert ecma_version(target) == expected


class TestTerserMinifier:
    """Running the terser CLI."""

    def test_missing_binary(self, monkeypatch) -> None:
        monkeypatch.setattr("tsbundle.core.minification.shutil.which", lambda name: None)

        with pytest.raises(MinificationError, match="terser CLI not available"):
            TerserMinifier()("var a = 1;", "ES5", "/a")

    def test_invokes_terser_with_target(self, monkeypatch) -> None:
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append((cmd, kwargs["input"]))
            return subprocess.CompletedProcess(cmd, 0, stdout="var a=1;", stderr="")

        monkeypatch.setattr("tsbundle.core.minification.subprocess.run", fake_run)

        result = TerserMinifier(binary="/opt/terser")("var a = 1;", "ES2017", "/a")

        assert result == "var a=1;"
        assert calls == [(["/opt/terser", "--compress", "--mangle", "--ecma", "2017"], "var a = 1;")]

    def test_failure_is_reported_with_label(self, monkeypatch) -> None:
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="Unexpected token\n")

        monkeypatch.setattr("tsbundle.core.minification.subprocess.run", fake_run)

        with pytest.raises(MinificationError, match="/broken: Unexpected token"):
            TerserMinifier(binary="terser")("var =", "ES5", "/broken")

    def test_compress_options_are_passed_to_terser(self, monkeypatch) -> None:
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr("tsbundle.core.minification.subprocess.run", fake_run)
        minifier = TerserMinifier(binary="terser", compress_options={"passes": 2, "drop_console": True})

        minifier("var a = 1;", "ES5", "/a")

        assert calls == [["terser", "--compress", "drop_console=true,passes=2", "--mangle", "--ecma", "5"]]
