import io
import logging

from u2fserver import Device, config
from u2fserver.__main__ import main


def _write_record(tmp_path, certificate, name="device.json", counter=7):
    path = tmp_path / name
    device = Device(bytes.fromhex("0102"), bytes.fromhex("AABB"), certificate, counter)
    path.write_text(device.to_json(), encoding="utf-8")
    return path


def test_inspect_prints_rendering(tmp_path, capsys, attestation_certificate):
    path = _write_record(tmp_path, attestation_certificate)

    assert main(["inspect", str(path)]) == 0

    out = capsys.readouterr().out
    assert "key_handle: AQI" in out
    assert "counter: 7" in out


def test_inspect_reads_stdin(monkeypatch, capsys, attestation_certificate):
    device = Device(b"\x01", b"\x02", attestation_certificate, 3)
    monkeypatch.setattr("sys.stdin", io.StringIO(device.to_json()))

    assert main(["inspect", "-"]) == 0
    assert "counter: 3" in capsys.readouterr().out


def test_inspect_reports_malformed_records(
    tmp_path, capsys, caplog, attestation_certificate
):
    good = _write_record(tmp_path, attestation_certificate, counter=1)
    bad = tmp_path / "bad.json"
    bad.write_text('{"keyHandle": "AQI"', encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="u2fserver.inspect"):
        assert main(["inspect", str(bad), str(good)]) == 1

    assert "Unable to decode" in caplog.text
    assert "counter: 1" in capsys.readouterr().out


def test_inspect_reports_missing_files(tmp_path, caplog):
    with caplog.at_level(logging.ERROR, logger="u2fserver.inspect"):
        assert main(["inspect", str(tmp_path / "missing.json")]) == 1

    assert "Unable to read" in caplog.text


def test_inspect_strict_flag(tmp_path, monkeypatch, attestation_certificate):
    monkeypatch.setattr(config, "settings", config.Settings(strict_json=False))
    path = _write_record(tmp_path, attestation_certificate)
    path.write_text(
        path.read_text(encoding="utf-8")[:-1] + ', "nickname": "spare"}',
        encoding="utf-8",
    )

    assert main(["inspect", str(path)]) == 0
    assert main(["inspect", "--strict", str(path)]) == 1
