"""
Command Line Tests
"""

import pytest

from main import build_parser, main


class TestParser:
    """Argument parsing"""

    def test_response_defaults(self):
        args = build_parser().parse_args(["response"])
        assert args.command == "response"
        assert args.count == 24
        assert args.min_hz is None
        assert args.verbose == 0

    def test_global_options(self):
        args = build_parser().parse_args(
            ["--cutoff", "800", "--resonance", "-3", "--preset", "1", "-vv", "render", "a.wav", "b.wav"]
        )
        assert args.cutoff == 800.0
        assert args.resonance == -3.0
        assert args.preset == "1"
        assert args.verbose == 2
        assert (args.input, args.output) == ("a.wav", "b.wav")

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    """End-to-end command runs"""

    def test_response_table(self, tmp_path, capsys):
        code = main(["--config", str(tmp_path / "cli.yaml"), "response", "--count", "5"])

        out = capsys.readouterr().out.splitlines()
        assert code == 0
        assert "frequency (Hz)" in out[0]
        assert len(out) == 6
        first = out[1].split()
        assert float(first[0]) == pytest.approx(12.0)
        assert float(first[1]) == pytest.approx(1.0, abs=0.01)

    def test_response_with_parameters(self, tmp_path, capsys):
        code = main([
            "--config", str(tmp_path / "cli.yaml"),
            "--cutoff", "2000", "--resonance", "12",
            "response", "--count", "3", "--min-hz", "2000",
        ])

        out = capsys.readouterr().out.splitlines()
        assert code == 0
        # Resonance peak at the cutoff
        assert float(out[1].split()[2]) > 9.0

    def test_presets(self, tmp_path, capsys):
        code = main(["--config", str(tmp_path / "cli.yaml"), "presets"])

        out = capsys.readouterr().out.splitlines()
        assert code == 0
        assert out == ["0: Preset One (200 Hz, -5 dB)", "1: Preset Two (1000 Hz, +10 dB)"]

    def test_unknown_preset_fails(self, tmp_path, capsys):
        code = main(["--config", str(tmp_path / "cli.yaml"), "--preset", "Preset Nine", "presets"])

        assert code == 2
        assert "Preset Nine" in capsys.readouterr().err

    def test_render_unsupported_input_fails(self, tmp_path, capsys):
        source = tmp_path / "notes.txt"
        source.write_text("not audio", encoding="utf-8")

        code = main(["--config", str(tmp_path / "cli.yaml"), "render", str(source), str(tmp_path / "out.wav")])

        assert code == 2
        assert capsys.readouterr().err.startswith("error:")
        assert not (tmp_path / "out.wav").exists()
