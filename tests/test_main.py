"""Tests for the SrcPack run controller.

This module tests:
- Ignore-pattern collection and priority order
- Single-file versus directory sources
- --list output
"""

import argparse
import io
import logging
import tarfile

import pytest

from srcpack.core.config import ConfigManager, ConfigSource
from srcpack.core.logging import Logger
from srcpack.main import SrcPackMain, run_srcpack


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def logger(log_stream):
    handler = logging.StreamHandler(log_stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    return Logger("srcpack.main.test", level="DEBUG", handlers=[handler])


@pytest.fixture
def config():
    return ConfigManager(environ={})


@pytest.fixture
def make_args(tarball):
    """Build an argparse namespace the way parse_arguments would."""

    def _make(source, **overrides):
        args = argparse.Namespace(
            source=str(source),
            output=str(tarball),
            config=None,
            ignore=[],
            ignore_file=None,
            no_ignore_file=False,
            compression_level=None,
            list=False,
            debug=False,
            log_file=None,
        )
        for key, value in overrides.items():
            setattr(args, key, value)
        return args

    return _make


class TestCollectPatterns:
    """Test ignore-pattern gathering."""

    def test_no_sources(self, standard_source, make_args, config, logger):
        main = SrcPackMain(make_args(standard_source), config, logger)

        assert main.collect_patterns() == []

    def test_priority_order(self, standard_source, temp_dir, make_args, config, logger, log_stream):
        (standard_source / ".dockerignore").write_text("# root\nfrom-root\n")
        extra = temp_dir / "extra.ignore"
        extra.write_text("from-file\n")
        config.set("srcpack.ignore", ["from-config"], ConfigSource.USER_CONFIG)

        main = SrcPackMain(
            make_args(standard_source, ignore_file=str(extra), ignore=["from-flag"]),
            config,
            logger,
        )

        assert main.collect_patterns() == ["from-root", "from-file", "from-config", "from-flag"]
        assert "Loaded ignore file" in log_stream.getvalue()

    def test_custom_ignore_file_name(self, standard_source, make_args, config, logger):
        (standard_source / ".dockerignore").write_text("docker\n")
        (standard_source / ".srcpackignore").write_text("srcpack\n")
        config.set("srcpack.ignore_file_name", ".srcpackignore")

        main = SrcPackMain(make_args(standard_source), config, logger)

        assert main.collect_patterns() == ["srcpack"]

    def test_ignore_file_disabled(self, standard_source, make_args, config, logger):
        (standard_source / ".dockerignore").write_text("dir\n")
        config.set("srcpack.ignore_file_name", None, ConfigSource.CLI_ARGS)

        main = SrcPackMain(make_args(standard_source, no_ignore_file=True), config, logger)

        assert main.collect_patterns() == []

    def test_file_source_skips_root_ignore_file(self, temp_dir, make_args, config, logger):
        (temp_dir / ".dockerignore").write_text("*\n")
        source = temp_dir / "Dockerfile"
        source.write_text("FROM scratch\n")

        main = SrcPackMain(make_args(source), config, logger)

        assert main.collect_patterns() == []


class TestRun:
    """Test complete runs."""

    def test_directory_source(self, standard_source, tarball, make_args, config, logger):
        (standard_source / ".dockerignore").write_text("*\n!dir/**\n")

        assert run_srcpack(make_args(standard_source), config, logger) == 0

        with tarfile.open(tarball, "r:gz") as tar:
            assert sorted(tar.getnames()) == ["dir", "dir/a.txt", "dir/b.txt"]

    def test_ignore_file_can_exclude_itself(self, standard_source, tarball, make_args, config, logger):
        (standard_source / ".dockerignore").write_text(".dockerignore\ndirectory\n")

        run_srcpack(make_args(standard_source), config, logger)

        with tarfile.open(tarball, "r:gz") as tar:
            assert sorted(tar.getnames()) == ["dir", "dir/a.txt", "dir/b.txt"]

    def test_flag_overrides_ignore_file(self, standard_source, tarball, make_args, config, logger):
        (standard_source / ".dockerignore").write_text("dir\ndirectory\n.dockerignore\n")

        run_srcpack(make_args(standard_source, ignore=["!directory"]), config, logger)

        with tarfile.open(tarball, "r:gz") as tar:
            assert sorted(tar.getnames()) == [
                "directory",
                "directory/a.txt",
                "directory/b.txt",
            ]

    def test_file_source(self, temp_dir, tarball, make_args, config, logger):
        source = temp_dir / "Dockerfile"
        source.write_text("FROM scratch\n")

        assert run_srcpack(make_args(source), config, logger) == 0

        with tarfile.open(tarball, "r:gz") as tar:
            assert tar.getnames() == ["Dockerfile"]

    def test_missing_source(self, temp_dir, tarball, make_args, config, logger):
        assert run_srcpack(make_args(temp_dir / "missing"), config, logger) == 0

        with tarfile.open(tarball, "r:gz") as tar:
            assert tar.getnames() == []

    def test_list_output(self, standard_source, make_args, config, logger, capsys):
        run_srcpack(make_args(standard_source, list=True, ignore=["directory"]), config, logger)

        printed = capsys.readouterr().out.splitlines()
        assert sorted(printed[:2]) == [
            str(standard_source / "dir" / "a.txt"),
            str(standard_source / "dir" / "b.txt"),
        ]
        assert printed[2:] == [str(standard_source / "dir")]

    def test_compression_level_from_config(self, standard_source, tarball, make_args, config, logger):
        config.set("srcpack.compression_level", 1)

        main = SrcPackMain(make_args(standard_source), config, logger)
        archive = main.build_archive()

        assert archive.filename == str(tarball)
        assert len(archive) == 6

    def test_logs_summary(self, standard_source, make_args, config, logger, log_stream):
        run_srcpack(make_args(standard_source), config, logger)

        output = log_stream.getvalue()
        assert "Packing source" in output
        assert "Archive written" in output
        assert "Build context ready" in output
        assert "entries=6" in output
