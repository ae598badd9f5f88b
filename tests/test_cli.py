"""Tests for the command line entry point."""

import json

import pytest

from objfetch.fetcher.__main__ import main, parse_attributes, run_fetch
from objfetch.fetcher.config.settings import FetcherSettings
from objfetch.fetcher.core.exceptions import ConfigurationException
from objfetch.schema.storage import ObjectMetadata


def test_parse_attributes():
    assert parse_attributes(["filename=a.txt", "note=x=y"]) == {"filename": "a.txt", "note": "x=y"}
    assert parse_attributes(None) == {}


@pytest.mark.parametrize("pair", ["novalue", "=value"])
def test_parse_attributes_rejects(pair):
    with pytest.raises(ConfigurationException):
        parse_attributes([pair])


def test_run_fetch_success_writes_output(store, tmp_path, capsys):
    store.put("data", "a.txt", b"payload", ObjectMetadata(content_type="text/plain"))
    output = tmp_path / "out.bin"

    code = run_fetch(FetcherSettings(bucket="data"), {"filename": "a.txt"}, output=output, store=store)

    assert code == 0
    assert output.read_bytes() == b"payload"
    report = json.loads(capsys.readouterr().out)
    assert report["channel"] == "success"
    assert report["size"] == 7
    assert report["attributes"]["mime.type"] == "text/plain"


def test_run_fetch_failure(store, tmp_path, capsys):
    output = tmp_path / "out.bin"

    code = run_fetch(FetcherSettings(bucket="data"), {"filename": "missing.txt"}, output=output, store=store)

    assert code == 1
    assert not output.exists()
    report = json.loads(capsys.readouterr().out)
    assert report["channel"] == "failure"
    assert report["error_type"] == "retrieval_error"


def test_main_show_config_masks_secrets(capsys, monkeypatch):
    monkeypatch.setenv("FETCHER_ACCESS_KEY", "AKIA")
    monkeypatch.setenv("FETCHER_SECRET_KEY", "secret")

    code = main(["show-config", "--bucket", "data", "--region", "eu-west-1"])

    assert code == 0
    out = capsys.readouterr().out
    config = json.loads(out)
    assert config["bucket"] == "data"
    assert config["region"] == "eu-west-1"
    assert config["secret_key"] == "****"
    assert "secret\"" not in out


def test_main_invalid_configuration(capsys):
    code = main(["fetch", "--bucket", "data", "--range-start", " "])

    assert code == 1
    assert "Invalid configuration" in capsys.readouterr().out


def test_main_without_command(capsys):
    assert main([]) == 1
