#!/usr/bin/env python3
"""
Tests for the langxml command line.
"""

import io
import json
import zipfile
from xml.etree import ElementTree as ET

import pytest

from langxml.cli import main


def run(capsys, *argv):
    main(list(argv))
    return json.loads(capsys.readouterr().out)


def test_formats(capsys):
    result = run(capsys, "formats")
    assert [f["name"] for f in result["formats"]] == ["language", "resx"]


def test_init(capsys, source_file):
    result = run(capsys, "init", "--input", str(source_file))

    assert result["format"] == "language"
    assert result["progress"]["total"] == 12
    assert result["progress_file"].endswith("english_progress.json")


def test_set_then_status(capsys, source_file, tmp_path):
    progress_file = str(tmp_path / "english_progress.json")

    result = run(capsys, "set", "-i", str(source_file), "-p", progress_file,
                 "-k", "Things|Lamp_Value", "-t", "Lâmpada")
    assert result["record"]["status"] == "saved"
    assert json.loads((tmp_path / "english_progress.json").read_text(encoding="utf-8"))[
        "translations"] == {"Things|Lamp_Value": "Lâmpada"}

    status = run(capsys, "status", "-i", str(source_file), "-p", progress_file)
    assert status["progress"]["saved"] == 1


def test_list_filters(capsys, source_file):
    result = run(capsys, "list", "-i", str(source_file), "--category", "tips")
    assert [r["key"] for r in result["records"]] == ["GameTip_1", "GameTip_2"]

    result = run(capsys, "list", "-i", str(source_file), "--section", "Things", "--search", "wrench")
    assert [r["key"] for r in result["records"]] == ["ItemWrench_Value", "ItemWrench_Description"]

    result = run(capsys, "list", "-i", str(source_file), "--status", "saved")
    assert result["count"] == 0


def test_merge(capsys, source_file, tmp_path):
    progress_file = str(tmp_path / "english_progress.json")
    run(capsys, "set", "-i", str(source_file), "-p", progress_file,
        "-k", "Keys|Jump_Value", "-t", "Saltar")

    result = run(capsys, "merge", "-i", str(source_file), "-p", progress_file,
                 "--name", "Português", "--code", "PB")

    output = tmp_path / "english_translated.xml"
    assert result["output_file"] == str(output)
    assert result["stats"]["patched"] == 1
    root = ET.fromstring(output.read_text(encoding="utf-8"))
    assert root.find("Keys/Record/Value").text == "Saltar"
    assert root.find("Name").text == "Português"


def test_merge_metadata_only(capsys, source_file, tmp_path):
    output = tmp_path / "out.xml"
    run(capsys, "merge", "-i", str(source_file), "--metadata-only", "--code", "PB", "-o", str(output))

    root = ET.fromstring(output.read_text(encoding="utf-8"))
    assert root.find("Code").text == "PB"
    assert root.find("Name").text == "English"


def test_export(capsys, source_file, tmp_path):
    result = run(capsys, "export", "-i", str(source_file), "--name", "Português", "--code", "PB",
                 "--output-dir", str(tmp_path / "dist"))

    archive = tmp_path / "dist" / "português_PB.zip"
    assert result["output_file"] == str(archive)
    with zipfile.ZipFile(io.BytesIO(archive.read_bytes())) as zf:
        assert zf.namelist() == result["files"]
    assert len(result["files"]) == 5


def test_custom_config(capsys, source_file, tmp_path):
    config = tmp_path / "layout.yaml"
    config.write_text("schema:\n  - {section: Keys, record: Record}\n", encoding="utf-8")

    result = run(capsys, "--config", str(config), "init", "-i", str(source_file))

    # tips and help pages are always read
    assert result["sections"] == {"Keys": 1, "GameTip": 2, "HelpPage": 2}


def test_error_is_reported_as_json(capsys, tmp_path):
    bad = tmp_path / "bad.xml"
    bad.write_text("<Language><Things>", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["status", "-i", str(bad)])

    assert exc_info.value.code == 1
    error = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert error["status"] == "error"
    assert error["error_type"] == "ParseError"


def test_unknown_key(capsys, source_file, tmp_path):
    with pytest.raises(SystemExit):
        main(["set", "-i", str(source_file), "-p", str(tmp_path / "p.json"),
              "-k", "Keys|Nope", "-t", "x"])
    error = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert error["error_type"] == "KeyError"


def test_no_command(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
