"""
CLI Tests - exit codes and output of the ``eifscope`` command.
"""

import json

import pytest
from click.testing import CliRunner

from eifscope.cli import eifscope_cli

KERNEL, METADATA = 1, 5


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def image_path(tmp_path, build_image, make_section):
    path = tmp_path / "enclave.eif"
    path.write_bytes(build_image([
        make_section(KERNEL, b"k" * 128),
        make_section(METADATA, b'{"ImageName": "demo"}'),
    ]))
    return path


class TestCli:

    def test_success(self, runner, image_path):
        result = runner.invoke(eifscope_cli, [str(image_path)])
        assert result.exit_code == 0, result.output
        assert "kernel" in result.output
        assert "metadata" in result.output
        assert "ImageName" in result.output
        assert "CRC32 verified" in result.output

    def test_missing_argument(self, runner):
        result = runner.invoke(eifscope_cli, [])
        assert result.exit_code == 1
        assert "Expected EIF file path" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(eifscope_cli, [str(tmp_path / "nope.eif")])
        assert result.exit_code == 1
        assert "Failed to open file" in result.output

    def test_structural_error(self, runner, tmp_path):
        path = tmp_path / "short.eif"
        path.write_bytes(b".eif" + b"\x00" * 100)
        result = runner.invoke(eifscope_cli, [str(path)])
        assert result.exit_code == 1
        assert "Truncated header" in result.output

    def test_bad_magic(self, runner, tmp_path, build_image):
        path = tmp_path / "bad.eif"
        path.write_bytes(build_image([], magic=b"NOPE"))
        result = runner.invoke(eifscope_cli, [str(path)])
        assert result.exit_code == 1
        assert "Bad magic" in result.output

    def test_json_output(self, runner, image_path):
        result = runner.invoke(eifscope_cli, [str(image_path), "--json"])
        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["header"]["magic"] == ".eif"
        assert [s["type"] for s in report["sections"]] == ["kernel", "metadata"]
        assert report["metadata"]["json"] == {"ImageName": "demo"}
        assert report["checksum"]["matches"] is True
        assert report["findings"] == []

    def test_report_file(self, runner, image_path, tmp_path):
        out = tmp_path / "reports" / "image.json"
        result = runner.invoke(eifscope_cli, [str(image_path), "-o", str(out)])
        assert result.exit_code == 0, result.output
        report = json.loads(out.read_text(encoding="utf-8"))
        assert report["header"]["section_count"] == 2

    def test_strict_crc_failure(self, runner, tmp_path, build_image, make_section):
        path = tmp_path / "crc.eif"
        path.write_bytes(build_image([make_section(KERNEL, b"k")], fix_crc=False, crc32=1))
        result = runner.invoke(eifscope_cli, [str(path), "--strict-crc"])
        assert result.exit_code == 1
        assert "CRC32 mismatch" in result.output

    def test_no_crc(self, runner, tmp_path, build_image, make_section):
        path = tmp_path / "crc.eif"
        path.write_bytes(build_image([make_section(KERNEL, b"k")], fix_crc=False, crc32=1))
        result = runner.invoke(eifscope_cli, [str(path), "--no-crc", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["checksum"] is None

    def test_size_mismatch_still_succeeds(self, runner, tmp_path, build_image, make_section):
        path = tmp_path / "mm.eif"
        path.write_bytes(build_image([make_section(KERNEL, b"k" * 50, table_size=100)]))
        result = runner.invoke(eifscope_cli, [str(path)])
        assert result.exit_code == 0
        assert "mismatch" in result.output

    def test_explicit_config_missing(self, runner, image_path, tmp_path):
        result = runner.invoke(
            eifscope_cli, [str(image_path), "--config", str(tmp_path / "missing.toml")]
        )
        assert result.exit_code == 1
        assert "Failed to load config" in result.output

    def test_config_disables_crc(self, runner, tmp_path, build_image, make_section):
        cfg = tmp_path / "eifscope.toml"
        cfg.write_text("[reader]\nverify_crc32 = false\n", encoding="utf-8")
        path = tmp_path / "crc.eif"
        path.write_bytes(build_image([make_section(KERNEL, b"k")], fix_crc=False, crc32=1))
        result = runner.invoke(eifscope_cli, [str(path), "--config", str(cfg), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["checksum"] is None

    def test_extra_argument(self, runner, image_path):
        result = runner.invoke(eifscope_cli, [str(image_path), "extra"])
        assert result.exit_code == 1
        assert "Expected EIF file path" in result.output

    def test_report_into_directory_fails_cleanly(self, runner, image_path, tmp_path):
        result = runner.invoke(eifscope_cli, [str(image_path), "-o", str(tmp_path)])
        assert result.exit_code == 1
        assert "Failed to write report" in result.output
        assert not isinstance(result.exception, OSError)

    def test_report_under_output_dir(self, runner, image_path, tmp_path):
        reports = tmp_path / "reports"
        cfg = tmp_path / "eifscope.toml"
        cfg.write_text(f"[global]\noutput_dir = {json.dumps(str(reports))}\n", encoding="utf-8")
        result = runner.invoke(
            eifscope_cli, [str(image_path), "--config", str(cfg), "-o", "image.json"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads((reports / "image.json").read_text(encoding="utf-8"))["sections"]

    def test_invalid_config_value(self, runner, image_path, tmp_path):
        cfg = tmp_path / "eifscope.toml"
        cfg.write_text("[reader]\ncrc_chunk_size = 0\n", encoding="utf-8")
        result = runner.invoke(eifscope_cli, [str(image_path), "--config", str(cfg)])
        assert result.exit_code == 1
        assert "crc_chunk_size" in result.output
