"""Command dispatch tests for ``python -m vegacatalog``."""

from __future__ import annotations

from vegacatalog import __main__ as cli


def test_unknown_command_is_rejected(capsys) -> None:
    assert cli.main(["publish"]) == 2
    assert "Unknown command: publish" in capsys.readouterr().err


def test_generate_command_forwards_arguments(monkeypatch) -> None:
    received: list[list[str]] = []

    def fake_generate(argv):
        received.append(list(argv))
        return 0

    monkeypatch.setattr("app.generate.main", fake_generate)

    assert cli.main(["generate", "-o", "out.json"]) == 0
    assert received == [["-o", "out.json"]]


def test_serve_is_the_default_command(monkeypatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(cli, "serve", lambda: calls.append("serve"))

    assert cli.main([]) == 0
    assert calls == ["serve"]
