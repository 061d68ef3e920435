import json

import pytest
from PIL import Image

from qrgen.cli import build_parser, main


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage: qrgen" in capsys.readouterr().out


def test_show(capsys):
    assert main(["show", "HELLO WORLD"]) == 0
    out = capsys.readouterr().out
    assert "Version: 1, ECC: QUARTILE" in out
    assert "##############" in out


def test_show_without_boost(capsys):
    assert main(["show", "HELLO WORLD", "--no-boost", "-e", "M", "-m", "2"]) == 0
    assert "Version: 1, ECC: MEDIUM, Mask: 2" in capsys.readouterr().out


def test_encode_writes_image(tmp_path, capsys):
    output = tmp_path / "nested" / "qr.png"
    assert main(["encode", "HELLO", "-o", str(output), "--box-size", "2", "--border", "1"]) == 0
    assert output.exists()
    with Image.open(output) as img:
        assert img.size == (46, 46)
    assert f"Generated: {output} (46x46)" in capsys.readouterr().out


def test_encode_binary_file(tmp_path, capsys):
    payload = tmp_path / "payload.bin"
    payload.write_bytes(bytes(range(256)) * 2)
    output = tmp_path / "bin.png"
    assert main(["encode", str(payload), "--binary", "-o", str(output)]) == 0
    assert output.exists()


def test_min_version(capsys):
    assert main(["show", "A", "--min-version", "3"]) == 0
    assert "Version: 3" in capsys.readouterr().out


def test_too_long_reports_error(capsys):
    assert main(["show", "A" * 4297]) == 1
    err = capsys.readouterr().err
    assert "error: Data length = 23651 bits, Max capacity = 23648 bits" in err


@pytest.mark.parametrize("extra", [["-m", "9"], ["--min-version", "0"], ["--max-version", "0"]])
def test_bad_ranges_report_error(capsys, extra):
    assert main(["show", "HELLO", *extra]) == 1
    assert "error:" in capsys.readouterr().err


def test_unknown_ecc_letter_is_rejected_by_parser():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["show", "x", "-e", "X"])


def test_log_file_gets_json_events(tmp_path, capsys):
    log_file = tmp_path / "qrgen.log"
    assert main(["--log-file", str(log_file), "show", "HELLO"]) == 0
    entries = [json.loads(line) for line in log_file.read_text().splitlines()]
    names = [e.get("event") for e in entries]
    assert "cli.start" in names
    assert "qr.encoded" in names
    assert "cli.done" in names
    [encoded] = [e for e in entries if e.get("event") == "qr.encoded"]
    assert encoded["level"] == "AUDIT"
    assert encoded["ctx"]["version"] == 1


def test_verbose_logs_trace_events(tmp_path, capsys):
    log_file = tmp_path / "debug.log"
    assert main(["-V", "--log-file", str(log_file), "show", "HELLO"]) == 0
    names = [json.loads(line).get("event") for line in log_file.read_text().splitlines()]
    assert "encode_segments.enter" in names
    assert "encode_segments.done" in names
