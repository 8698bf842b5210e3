from __future__ import annotations

import io

import pytest

from minftp import cli


def scripted(*answers):
    it = iter(answers)
    asked = []

    def prompt(question):
        asked.append(question)
        return next(it)

    prompt.asked = asked
    return prompt


def test_valid_argued_port_is_used_without_prompting():
    prompt = scripted()
    assert cli.get_valid_port("2021", prompt) == 2021
    assert prompt.asked == []


@pytest.mark.parametrize("argued", [None, "abc", "80", "70000", ""])
def test_invalid_port_prompts_until_valid(argued):
    prompt = scripted("nope", "1023", " 4000 ")
    assert cli.get_valid_port(argued, prompt) == 4000
    assert len(prompt.asked) == 3
    assert prompt.asked[0] == "Enter a valid port number [1024 - 65535]: "


def test_conflict_overwrite():
    assert cli.ask_on_conflict("a.txt", scripted("1"), io.StringIO()) == "a.txt"


def test_conflict_rename_after_bad_choice():
    out = io.StringIO()
    prompt = scripted("9", "2", "  ", "b.txt")
    assert cli.ask_on_conflict("a.txt", prompt, out) == "b.txt"
    assert 'The file "a.txt" already exists' in out.getvalue()


def test_conflict_cancel():
    assert cli.ask_on_conflict("a.txt", scripted("3"), io.StringIO()) is None


def test_serve_exits_when_port_is_taken(monkeypatch):
    def taken(config):
        raise OSError(98, "Address already in use")

    monkeypatch.setattr(cli.FtpServer, "from_config", taken)
    with pytest.raises(SystemExit) as exc:
        cli.main(["serve", "2021"])
    assert "could not listen" in str(exc.value)


def test_subcommand_is_required():
    with pytest.raises(SystemExit):
        cli.main([])


def refused(self, command, filename, receive):
    raise ConnectionRefusedError(111, "Connection refused")


def test_list_reports_unreachable_server(monkeypatch, capsys):
    monkeypatch.setattr(cli.FtpClient, "_exchange", refused)
    assert cli.main(["list", "127.0.0.1", "2021"]) == 1
    out = capsys.readouterr().out
    assert out.startswith("Listing from 127.0.0.1:2021 failed:")
    assert "Connection refused" in out
    assert len(out.splitlines()) == 1


def test_get_reports_unreachable_server(monkeypatch, capsys, tmp_path):
    monkeypatch.setattr(cli.FtpClient, "_exchange", refused)
    argv = ["get", "127.0.0.1", "2021", "a.txt", "--save-as", str(tmp_path / "a.txt"), "--on-conflict", "overwrite"]
    assert cli.main(argv) == 1
    out = capsys.readouterr().out
    assert out.startswith('Fetching "a.txt" from 127.0.0.1:2021 failed:')
    assert len(out.splitlines()) == 1
    assert not (tmp_path / "a.txt").exists()
