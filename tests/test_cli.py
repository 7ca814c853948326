"""Tests for CLI argument parsing and configuration.

This module tests the command-line interface including:
- Argument parsing and validation
- Merging arguments over configuration files
- Builder selection per metadata source
- End-to-end runs through main()
"""

import os
from pathlib import Path

import pytest
import yaml

from linktree.builder import LinkTreeBuilder, RunStats, SidecarLinkTreeBuilder
from linktree.cli import (
    CLIError,
    build_builder_options,
    build_config_from_args,
    build_file_filter,
    create_builder,
    format_summary,
    main,
    parse_arguments,
    setup_logging,
    skip_file,
)
from linktree.infrastructure.logger import LogLevel, get_logger


class TestParseArguments:
    """Test argument parsing."""

    def test_parse_basic_arguments(self):
        """Parses storage roots, link root and link paths."""
        args = parse_arguments(
            [
                "--storage-root", "trove/files", "trove/more",
                "--link-root", "trove/links",
                "--link-path", "religion,date",
                "-p", "tradition, date",
            ]
        )

        assert args.storage_roots == ["trove/files", "trove/more"]
        assert args.link_root == "trove/links"
        assert args.link_paths == ["religion,date", "tradition, date"]
        assert args.hardlink is None
        assert args.on_existing is None

    def test_parse_with_config_file(self, tmp_path):
        """Accepts a config file instead of storage roots."""
        config = tmp_path / "linktree.yaml"
        config.write_text("linktree: {}\n")

        args = parse_arguments(["--config", str(config)])

        assert args.config == str(config)
        assert args.storage_roots is None

    def test_requires_config_or_storage_root(self):
        with pytest.raises(CLIError, match="Either --config or --storage-root"):
            parse_arguments(["--link-root", "links"])

    def test_validates_config_file_exists(self, tmp_path):
        with pytest.raises(CLIError, match="does not exist"):
            parse_arguments(["--config", str(tmp_path / "missing.yaml")])

    def test_validates_config_is_file(self, tmp_path):
        with pytest.raises(CLIError, match="not a file"):
            parse_arguments(["--config", str(tmp_path)])

    @pytest.mark.parametrize("link_path", ["religion,", ",date", "religion,,date"])
    def test_rejects_empty_field_in_link_path(self, link_path):
        with pytest.raises(CLIError, match="Invalid link path"):
            parse_arguments(["-s", "files", "-p", link_path])

    def test_rejects_unknown_policy(self):
        with pytest.raises(SystemExit):
            parse_arguments(["-s", "files", "--on-existing", "die"])

    def test_version_option(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(["--version"])

        assert exc_info.value.code == 0
        assert "linktree 1.0.0" in capsys.readouterr().out


class TestBuildConfigFromArgs:
    """Test translation of arguments into a configuration section."""

    def test_only_given_options_present(self):
        config = build_config_from_args(parse_arguments(["-s", "files"]))

        assert config == {"linktree": {"storage_roots": ["files"]}}

    def test_all_options(self):
        args = parse_arguments(
            [
                "-s", "files",
                "-l", "links",
                "-p", "religion, date",
                "--hardlink",
                "--on-existing", "skip",
                "--include", "*.txt",
                "--exclude", "draft-*",
                "--metadata", "index",
                "--metadata-index", "meta.yaml",
                "--metadata-suffix", ".yml",
                "--require-metadata",
                "--debug",
                "--log-file", "run.log",
            ]
        )

        section = build_config_from_args(args)["linktree"]

        assert section["link_paths"] == [["religion", "date"]]
        assert section["hardlink"] is True
        assert section["on_existing"] == "skip"
        assert section["filter"] == {"include": ["*.txt"], "exclude": ["draft-*"]}
        assert section["metadata"] == {
            "type": "index",
            "index_file": "meta.yaml",
            "suffix": ".yml",
            "required": True,
        }
        assert section["logging"] == {"level": "DEBUG", "file": "run.log"}


class TestBuilderSelection:
    """Test builder construction from a merged section."""

    def test_no_filter_without_patterns(self):
        assert build_file_filter({"filter": {"include": [], "exclude": []}}) is None
        assert build_file_filter({}) is None

    def test_filter_from_patterns(self):
        file_filter = build_file_filter({"filter": {"include": ["*.txt"]}})

        assert file_filter("a.txt")
        assert not file_filter("a.md")

    def test_builder_options(self):
        options = build_builder_options(
            {"storage_roots": ["files"], "link_root": "links", "link_paths": [["a"]], "hardlink": None}
        )

        assert options == {
            "storage_roots": ["files"],
            "link_root": "links",
            "link_paths": [["a"]],
            "hardlink": False,
            "on_existing": None,
            "file_filter": None,
        }

    def test_sidecar_builder_by_default(self, logger):
        builder = create_builder({"storage_roots": ["files"]}, logger)

        assert isinstance(builder, SidecarLinkTreeBuilder)
        assert builder.sidecar_source.suffix == ".yaml"

    def test_sidecar_options(self, logger):
        builder = create_builder(
            {"storage_roots": ["files"], "metadata": {"suffix": ".meta", "required": True}},
            logger,
        )

        assert builder.sidecar_source.suffix == ".meta"
        assert builder.sidecar_source.required is True

    def test_index_builder(self, tmp_path, logger):
        builder = create_builder(
            {
                "storage_roots": ["files"],
                "metadata": {"type": "index", "index_file": str(tmp_path / "meta.yaml")},
            },
            logger,
        )

        assert type(builder) is LinkTreeBuilder

    def test_skip_file(self, tmp_path):
        index = tmp_path / "meta.yaml"
        index.write_text("{}")
        (tmp_path / "a.txt").write_text("x")

        accepts = skip_file(None, str(index))

        assert not accepts(str(index))
        assert accepts(str(tmp_path / "a.txt"))

    def test_skip_file_keeps_patterns(self, tmp_path):
        patterns = build_file_filter({"filter": {"include": ["*.txt"]}})

        accepts = skip_file(patterns, str(tmp_path / "meta.yaml"))

        assert accepts(str(tmp_path / "a.txt"))
        assert not accepts(str(tmp_path / "a.md"))

    def test_index_file_must_be_a_path(self, logger):
        with pytest.raises(CLIError, match="Index file must be a path"):
            create_builder(
                {"storage_roots": ["files"], "metadata": {"type": "index", "index_file": 2024}},
                logger,
            )

    def test_index_requires_file(self, logger):
        with pytest.raises(CLIError, match="--metadata-index"):
            create_builder({"storage_roots": ["files"], "metadata": {"type": "index"}}, logger)

    def test_unknown_metadata_type(self, logger):
        with pytest.raises(CLIError, match="Unknown metadata type"):
            create_builder({"storage_roots": ["files"], "metadata": {"type": "xattr"}}, logger)


class TestSetupLogging:
    """Test logger setup from the logging section."""

    def test_level_and_global_install(self):
        logger = setup_logging({"logging": {"level": "DEBUG"}})

        assert logger.logger.level == LogLevel.DEBUG
        assert get_logger() is logger

    def test_default_level(self):
        assert setup_logging({}).logger.level == LogLevel.INFO

    def test_invalid_level(self):
        with pytest.raises(CLIError, match="Invalid log level"):
            setup_logging({"logging": {"level": "LOUD"}})

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "run.log"

        logger = setup_logging({"logging": {"level": "INFO", "file": str(log_file)}})
        logger.info("Building link tree")
        for handler in logger.logger.handlers:
            handler.flush()

        assert "Building link tree" in log_file.read_text()


def test_format_summary():
    stats = RunStats(files_seen=3, links_created=5, links_skipped=1, directories_created=7)

    assert format_summary(stats) == "3 files, 5 links created, 1 skipped, 7 directories created"


class TestMain:
    """Test complete runs through main()."""

    def run_sidecar(self, sidecar_root, link_root, *extra):
        return main(
            [
                "--storage-root", str(sidecar_root),
                "--link-root", str(link_root),
                "--link-path", "religion,date",
                "--link-path", "tradition,date",
                *extra,
            ]
        )

    def test_sidecar_run(self, sidecar_root, link_root, capsys):
        assert self.run_sidecar(sidecar_root, link_root) == 0

        out = capsys.readouterr().out
        assert "3 files, 6 links created, 0 skipped, 11 directories created" in out

        link = link_root / "Christian" / "Dec25" / "christmas.txt"
        assert os.path.islink(link)
        assert os.readlink(link) == str(sidecar_root / "christmas.txt")
        assert os.path.islink(link_root / "-" / "Dec25" / "christmas.txt")
        assert not (link_root / "Christian" / "Dec25" / "christmas.txt.yaml").exists()

    def test_second_run_fails_by_default(self, sidecar_root, link_root, capsys):
        self.run_sidecar(sidecar_root, link_root)
        capsys.readouterr()

        assert self.run_sidecar(sidecar_root, link_root) == 1

        err = capsys.readouterr().err
        assert "Error: couldn't create link <" in err

    def test_second_run_with_skip(self, sidecar_root, link_root, capsys):
        self.run_sidecar(sidecar_root, link_root)
        capsys.readouterr()

        assert self.run_sidecar(sidecar_root, link_root, "--on-existing", "skip") == 0

        out = capsys.readouterr().out
        assert "3 files, 0 links created, 3 skipped, 0 directories created" in out

    def test_hardlink_run(self, sidecar_root, link_root):
        assert self.run_sidecar(sidecar_root, link_root, "--hardlink") == 0

        link = link_root / "Jewish" / "Kislev25" / "hanukkah.txt"
        assert not os.path.islink(link)
        assert os.path.samefile(link, sidecar_root / "hanukkah.txt")

    def test_include_filter(self, sidecar_root, link_root, capsys):
        assert self.run_sidecar(sidecar_root, link_root, "--include", "east*") == 0

        assert "1 files, 2 links created" in capsys.readouterr().out
        assert (link_root / "Eggs" / "Spring" / "easter.txt").is_symlink()

    def test_index_metadata(self, storage_root, link_root, tmp_path, capsys):
        index = tmp_path / "meta.yaml"
        index.write_text(yaml.safe_dump({"easter.txt": {"religion": "Christian", "date": "Spring"}}))

        code = main(
            [
                "-s", str(storage_root),
                "-l", str(link_root),
                "-p", "religion,date",
                "--metadata", "index",
                "--metadata-index", str(index),
                "--on-existing", "skip",
            ]
        )

        assert code == 0
        assert (link_root / "Christian" / "Spring" / "easter.txt").is_symlink()
        # files missing from the index land under the placeholder
        assert (link_root / "-" / "-" / "hanukkah.txt").is_symlink()
        assert "3 files, 3 links created, 0 skipped" in capsys.readouterr().out

    def test_index_inside_storage_root_not_linked(self, storage_root, link_root, capsys):
        index = storage_root / "meta.yaml"
        index.write_text(yaml.safe_dump({"easter.txt": {"religion": "Christian"}}))

        code = main(
            [
                "-s", str(storage_root),
                "-l", str(link_root),
                "-p", "religion",
                "--metadata", "index",
                "--metadata-index", str(index),
            ]
        )

        assert code == 0
        assert "3 files, 3 links created" in capsys.readouterr().out
        assert not (link_root / "-" / "meta.yaml").exists()

    def test_numeric_link_root_in_config(self, sidecar_root, tmp_path, capsys):
        config = tmp_path / "linktree.yaml"
        config.write_text(
            yaml.safe_dump(
                {
                    "linktree": {
                        "storage_roots": [str(sidecar_root)],
                        "link_root": 2024,
                        "link_paths": [["religion"]],
                    }
                }
            )
        )

        assert main(["--config", str(config)]) == 1
        assert "link_root must be a path, got int: 2024" in capsys.readouterr().err

    def test_numeric_link_root_in_environment(self, sidecar_root, monkeypatch, capsys):
        monkeypatch.setenv("LINKTREE_LINK_ROOT", "2024")

        assert main(["-s", str(sidecar_root), "-p", "religion"]) == 1
        assert "link_root must be a path" in capsys.readouterr().err

    def test_config_file_run(self, sidecar_root, link_root, tmp_path, capsys):
        config = tmp_path / "linktree.yaml"
        config.write_text(
            yaml.safe_dump(
                {
                    "linktree": {
                        "storage_roots": [str(sidecar_root)],
                        "link_root": str(tmp_path / "unused"),
                        "link_paths": [["religion"]],
                    }
                }
            )
        )

        assert main(["--config", str(config), "--link-root", str(link_root)]) == 0

        assert "3 files, 3 links created" in capsys.readouterr().out
        assert (link_root / "Jewish" / "hanukkah.txt").is_symlink()
        assert not (tmp_path / "unused").exists()

    def test_environment_override(self, sidecar_root, link_root, monkeypatch, capsys):
        monkeypatch.setenv("LINKTREE_ON_EXISTING", "skip")
        self.run_sidecar(sidecar_root, link_root)

        assert self.run_sidecar(sidecar_root, link_root) == 0
        assert "3 skipped" in capsys.readouterr().out

    def test_required_sidecar_missing(self, storage_root, link_root, capsys):
        code = main(
            ["-s", str(storage_root), "-l", str(link_root), "-p", "religion", "--require-metadata"]
        )

        assert code == 1
        assert "No metadata sidecar" in capsys.readouterr().err

    def test_missing_arguments(self, capsys):
        assert main([]) == 1
        assert "Either --config or --storage-root" in capsys.readouterr().err

    def test_missing_storage_root_is_not_fatal(self, tmp_path, link_root, capsys):
        code = main(["-s", str(tmp_path / "nowhere"), "-l", str(link_root), "-p", "religion"])

        assert code == 0
        assert "0 files, 0 links created" in capsys.readouterr().out
        assert not Path(link_root).exists()

    def test_keyboard_interrupt(self, monkeypatch, capsys):
        def interrupt(self):
            raise KeyboardInterrupt

        monkeypatch.setattr(SidecarLinkTreeBuilder, "run", interrupt)

        assert main(["-s", "files"]) == 130
        assert "Interrupted" in capsys.readouterr().err
