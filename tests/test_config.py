"""Tests for configuration loading and path validation."""

from pathlib import Path

import pytest

from media_pipeline.config import DEFAULT_TIMEOUT, Config
from media_pipeline.errors import ErrorCode, InvalidInputError, MediaFileNotFoundError
from media_pipeline.validation import validate_input_file, validate_output_file

ENV_VARS = [
    "FFMPEG_PATH",
    "FFPROBE_PATH",
    "FFMPEG_TIMEOUT",
    "MEDIA_PIPELINE_TEMP_DIR",
    "MEDIA_PIPELINE_KEEP_INTERMEDIATES",
    "MEDIA_PIPELINE_VERBOSE",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults(clean_env):
    config = Config.from_env()

    assert config.ffmpeg_path is None
    assert config.timeout == DEFAULT_TIMEOUT
    assert config.temp_dir is None
    assert not config.keep_intermediates
    assert not config.verbose


def test_reads_environment(clean_env, tmp_path):
    clean_env.setenv("FFMPEG_PATH", "/opt/ffmpeg/bin/ffmpeg")
    clean_env.setenv("FFPROBE_PATH", "/opt/ffmpeg/bin/ffprobe")
    clean_env.setenv("FFMPEG_TIMEOUT", "90")
    clean_env.setenv("MEDIA_PIPELINE_TEMP_DIR", str(tmp_path))
    clean_env.setenv("MEDIA_PIPELINE_KEEP_INTERMEDIATES", "yes")
    clean_env.setenv("MEDIA_PIPELINE_VERBOSE", "1")

    config = Config.from_env()

    assert config.ffmpeg_path == "/opt/ffmpeg/bin/ffmpeg"
    assert config.ffprobe_path == "/opt/ffmpeg/bin/ffprobe"
    assert config.timeout == 90.0
    assert config.temp_dir == tmp_path
    assert config.keep_intermediates
    assert config.verbose


def test_flags_need_truthy_values(clean_env):
    clean_env.setenv("MEDIA_PIPELINE_VERBOSE", "no")

    assert not Config.from_env().verbose


@pytest.mark.parametrize("timeout", [0, -1])
def test_require_timeout(timeout):
    with pytest.raises(ValueError):
        Config(timeout=timeout).require_timeout()


class TestValidation:
    def test_input_exists(self, source):
        assert validate_input_file(str(source)) == source

    @pytest.mark.parametrize("path", [None, ""])
    def test_input_empty(self, path):
        with pytest.raises(InvalidInputError) as exc_info:
            validate_input_file(path)
        assert exc_info.value.code is ErrorCode.INVALID_INPUT

    def test_input_missing(self, tmp_path):
        with pytest.raises(MediaFileNotFoundError) as exc_info:
            validate_input_file(tmp_path / "missing.mp4")

        assert exc_info.value.code is ErrorCode.FILE_NOT_FOUND
        assert isinstance(exc_info.value, FileNotFoundError)
        assert str(exc_info.value).startswith("FILE_NOT_FOUND: ")

    def test_output_parent_must_exist(self, tmp_path):
        assert validate_output_file(tmp_path / "out.mp4") == tmp_path / "out.mp4"

        with pytest.raises(InvalidInputError):
            validate_output_file(tmp_path / "nope" / "out.mp4")

    def test_output_relative_to_cwd(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)

        assert validate_output_file("out.mp4") == Path("out.mp4")

    def test_output_empty(self):
        with pytest.raises(InvalidInputError):
            validate_output_file("")
