"""Tests for the abr-orchestrator CLI commands."""

import json
from pathlib import Path

from click.testing import CliRunner

from abr_orchestrator.cli import main
from abr_orchestrator.cli.exit_codes import ExitCode
from abr_orchestrator.hls.playlist import build_master_playlist
from abr_orchestrator.profiles.defaults import DEFAULT_LADDER


class TestMainGroup:
    """Tests for the top-level group."""

    def test_help_lists_commands(self) -> None:
        """Help output should list every command."""
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("transcode", "playlist", "probe"):
            assert command in result.output

    def test_invalid_config_file_exits_with_config_error(
        self, tmp_path: Path
    ) -> None:
        """An invalid config value should exit with CONFIG_ERROR."""
        config = tmp_path / "config.toml"
        config.write_text("[processing]\nworkers = 0\n")
        result = CliRunner().invoke(main, ["--config", str(config), "playlist"])
        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Invalid [processing] configuration" in result.output


class TestPlaylistCommand:
    """Tests for the playlist command."""

    def test_default_ladder(self, base_args: list[str]) -> None:
        """Without --ladder the built-in ladder is printed."""
        result = CliRunner().invoke(main, [*base_args, "playlist"])
        assert result.exit_code == 0
        assert result.output.strip() == build_master_playlist(DEFAULT_LADDER.profiles)

    def test_ladder_file(self, base_args: list[str], ladder_file: Path) -> None:
        """A ladder file produces one variant per profile."""
        result = CliRunner().invoke(
            main, [*base_args, "playlist", "--ladder", str(ladder_file)]
        )
        assert result.exit_code == 0
        assert result.output.count("#EXT-X-STREAM-INF") == 1
        assert "BANDWIDTH=480," in result.output
        assert "480p/480p.m3u8" in result.output

    def test_missing_ladder_file(self, base_args: list[str], tmp_path: Path) -> None:
        """A missing ladder file exits with CONFIG_ERROR."""
        result = CliRunner().invoke(
            main, [*base_args, "playlist", "--ladder", str(tmp_path / "none.yaml")]
        )
        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Error:" in result.output

    def test_invalid_ladder_file(self, base_args: list[str], tmp_path: Path) -> None:
        """A malformed ladder file exits with CONFIG_ERROR."""
        ladder = tmp_path / "ladder.yaml"
        ladder.write_text("profiles:\n  720p:\n    width: -1\n")
        result = CliRunner().invoke(
            main, [*base_args, "playlist", "--ladder", str(ladder)]
        )
        assert result.exit_code == ExitCode.CONFIG_ERROR


class TestProbeCommand:
    """Tests for the probe command."""

    def test_probe_prints_json(self, base_args: list[str], fake_prober: Path) -> None:
        """Probe output is the serialized ProbeResult."""
        result = CliRunner().invoke(
            main,
            [*base_args, "probe", "--ffprobe", str(fake_prober), "source.mp4"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["duration_seconds"] == 4.0
        assert data["has_video"] is True
        assert data["has_audio"] is True
        assert data["keyframe_count"] == 2

    def test_probe_without_keyframes(
        self, base_args: list[str], fake_prober: Path
    ) -> None:
        """--no-keyframes skips the keyframe probe."""
        result = CliRunner().invoke(
            main,
            [
                *base_args,
                "probe",
                "--ffprobe",
                str(fake_prober),
                "--no-keyframes",
                "source.mp4",
            ],
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["keyframe_count"] is None

    def test_probe_failure(self, base_args: list[str], failing_prober: Path) -> None:
        """A failed probe exits with PROBE_FAILED and a JSON error."""
        result = CliRunner().invoke(
            main,
            [*base_args, "probe", "--ffprobe", str(failing_prober), "source.mp4"],
        )
        assert result.exit_code == ExitCode.PROBE_FAILED
        assert '"code": "PROBE_FAILED"' in result.output


class TestTranscodeCommand:
    """Tests for the transcode command."""

    def _args(
        self,
        base_args: list[str],
        tmp_path: Path,
        ladder_file: Path,
        encoder: Path,
        prober: Path,
    ) -> list[str]:
        return [
            *base_args,
            "transcode",
            "--ladder",
            str(ladder_file),
            "--output-base",
            str(tmp_path / "base"),
            "--ffmpeg",
            str(encoder),
            "--ffprobe",
            str(prober),
            "source.mp4",
        ]

    def test_success_human_output(
        self,
        base_args: list[str],
        tmp_path: Path,
        ladder_file: Path,
        fake_encoder: Path,
        fake_prober: Path,
    ) -> None:
        """A successful run prints a summary and exits 0."""
        args = self._args(base_args, tmp_path, ladder_file, fake_encoder, fake_prober)
        result = CliRunner().invoke(main, args)

        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert "[OK] 480p" in result.output
        assert "Segmentation: keyframe" in result.output
        assert "1 ok, 0 failed, 0 skipped" in result.output

    def test_success_json_output(
        self,
        base_args: list[str],
        tmp_path: Path,
        ladder_file: Path,
        fake_encoder: Path,
        fake_prober: Path,
    ) -> None:
        """--json prints the run result as JSON."""
        args = self._args(base_args, tmp_path, ladder_file, fake_encoder, fake_prober)
        result = CliRunner().invoke(main, [*args[:-1], "--json", args[-1]])

        assert result.exit_code == ExitCode.SUCCESS, result.output
        data = json.loads(result.output)
        work_dir = Path(data["work_dir"])
        assert work_dir.parent == tmp_path / "base" / "output"
        assert data["cancelled"] is False
        assert [p["status"] for p in data["profiles"]] == ["succeeded"]
        assert (work_dir / "playlist.m3u8").is_file()
        assert (work_dir / "480p" / "480p.m3u8").is_file()

    def test_encoder_failure_exits_operation_failed(
        self,
        base_args: list[str],
        tmp_path: Path,
        ladder_file: Path,
        failing_encoder: Path,
        fake_prober: Path,
    ) -> None:
        """A failed profile exits with OPERATION_FAILED."""
        args = self._args(
            base_args, tmp_path, ladder_file, failing_encoder, fake_prober
        )
        result = CliRunner().invoke(main, args)

        assert result.exit_code == ExitCode.OPERATION_FAILED
        assert "[FAILED] 480p" in result.output

    def test_probe_failure_still_encodes(
        self,
        base_args: list[str],
        tmp_path: Path,
        ladder_file: Path,
        fake_encoder: Path,
        failing_prober: Path,
    ) -> None:
        """A failed probe degrades to time-based segmentation."""
        args = self._args(
            base_args, tmp_path, ladder_file, fake_encoder, failing_prober
        )
        result = CliRunner().invoke(main, args)

        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert "Segmentation: time_based" in result.output

    def test_invalid_ladder_exits_config_error(
        self, base_args: list[str], tmp_path: Path
    ) -> None:
        """An invalid ladder exits with CONFIG_ERROR before encoding."""
        ladder = tmp_path / "ladder.yaml"
        ladder.write_text("profiles: {}\n")
        result = CliRunner().invoke(
            main, [*base_args, "transcode", "--ladder", str(ladder), "source.mp4"]
        )
        assert result.exit_code == ExitCode.CONFIG_ERROR

    def test_invalid_workers_rejected(self, base_args: list[str]) -> None:
        """Worker counts below one are rejected by option parsing."""
        result = CliRunner().invoke(
            main, [*base_args, "transcode", "--workers", "0", "source.mp4"]
        )
        assert result.exit_code == 2
        assert "--workers" in result.output
