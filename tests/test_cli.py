import pytest

import transcript_md.__main__ as entry
from transcript_md.errors import RemoteServiceError


class DummyClient:
    instances = []

    def __init__(self, settings, session=None):
        self.settings = settings
        self.requests = []
        DummyClient.instances.append(self)

    def chat_completion(self, messages):
        self.requests.append(messages)
        user_text = messages[1]["content"]
        if "boom" in user_text:
            raise RemoteServiceError("Completion service error 500: internal error", status_code=500)
        return f"# {user_text.strip()}"


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.setenv("TRANSCRIPT_MD_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-env")
    monkeypatch.delenv("OPENROUTER_BASE_URL", raising=False)
    monkeypatch.delenv("OPENROUTER_MODEL", raising=False)
    DummyClient.instances = []
    monkeypatch.setattr(entry, "OpenRouterClient", DummyClient)
    return tmp_path


@pytest.mark.parametrize("argv", [[], ["only-input.txt"]])
def test_missing_arguments_exit_with_code_one(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        entry.main(argv)
    assert excinfo.value.code == 1
    assert "usage" in capsys.readouterr().err


def test_converts_directory(isolated_env, capsys):
    source = isolated_env / "talk"
    source.mkdir()
    (source / "part2.txt").write_text("second", encoding="utf-8")
    (source / "part1.txt").write_text("first", encoding="utf-8")
    output = isolated_env / "talk.md"

    assert entry.main([str(source), str(output)]) == 0

    assert output.read_text(encoding="utf-8") == "# first\n\n---\n\n# second\n\n---\n\n"
    client = DummyClient.instances[0]
    assert client.settings.api_key == "sk-env"
    assert client.settings.model == "deepseek/deepseek-chat-v3-0324:free"
    assert "markdown" in client.requests[0][0]["content"]
    assert "Conversion completed successfully" in capsys.readouterr().out


def test_prompt_file_and_model_flags(isolated_env):
    transcript = isolated_env / "talk.txt"
    transcript.write_text("hello", encoding="utf-8")
    prompt = isolated_env / "prompt.md"
    prompt.write_text("Custom rules.", encoding="utf-8")
    output = isolated_env / "talk.md"

    code = entry.main(
        [str(transcript), str(output), "--prompt-file", str(prompt), "--model", "openai/gpt-4o-mini", "--timeout", "15"]
    )

    assert code == 0
    assert output.read_text(encoding="utf-8") == "# hello"
    client = DummyClient.instances[0]
    assert client.requests[0][0] == {"role": "system", "content": "Custom rules."}
    assert client.settings.model == "openai/gpt-4o-mini"
    assert client.settings.timeout == 15.0


def test_empty_directory_exits_non_zero(isolated_env, capsys):
    source = isolated_env / "empty"
    source.mkdir()
    (source / "readme.md").write_text("not a transcript", encoding="utf-8")
    output = isolated_env / "out.md"

    assert entry.main([str(source), str(output)]) == 1

    assert not output.exists()
    assert "No transcript files found" in capsys.readouterr().err


def test_invalid_input_path_exits_non_zero(isolated_env, capsys):
    assert entry.main([str(isolated_env / "nope"), str(isolated_env / "out.md")]) == 1
    assert "[ERR]" in capsys.readouterr().err


def test_remote_failure_on_second_file_writes_nothing(isolated_env, capsys):
    source = isolated_env / "series"
    source.mkdir()
    (source / "a1.txt").write_text("fine", encoding="utf-8")
    (source / "a2.txt").write_text("boom", encoding="utf-8")
    (source / "a3.txt").write_text("never sent", encoding="utf-8")
    output = isolated_env / "out.md"

    assert entry.main([str(source), str(output)]) == 1

    assert not output.exists()
    assert len(DummyClient.instances[0].requests) == 2
    err = capsys.readouterr().err
    assert "a2.txt" in err
    assert "internal error" in err


def test_missing_api_key_exits_non_zero(isolated_env, monkeypatch, capsys):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    transcript = isolated_env / "talk.txt"
    transcript.write_text("hello", encoding="utf-8")

    assert entry.main([str(transcript), str(isolated_env / "out.md")]) == 1

    assert "API key" in capsys.readouterr().err
    assert DummyClient.instances == []


def test_empty_transcript_does_not_abort_batch(isolated_env):
    source = isolated_env / "parts"
    source.mkdir()
    (source / "part1.txt").write_text("hello", encoding="utf-8")
    (source / "part2.txt").write_text("", encoding="utf-8")
    output = isolated_env / "out.md"

    assert entry.main([str(source), str(output)]) == 0

    assert output.read_text(encoding="utf-8") == "# hello\n\n---\n\n# \n\n---\n\n"
    assert DummyClient.instances[0].requests[1][1] == {"role": "user", "content": ""}


@pytest.mark.parametrize("flag", ["--provider-options", "--reasoning-effort"])
def test_unknown_options_exit_with_usage(isolated_env, flag, capsys):
    transcript = isolated_env / "talk.txt"
    transcript.write_text("hello", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        entry.main([str(transcript), str(isolated_env / "out.md"), flag, "@missing.json"])

    assert excinfo.value.code == 1
    assert "unrecognized arguments" in capsys.readouterr().err
    assert DummyClient.instances == []


def test_collation_locale_failure_is_not_fatal(isolated_env, monkeypatch):
    def refuse(category, value=None):
        raise entry.locale.Error("unsupported locale setting")

    monkeypatch.setattr(entry.locale, "setlocale", refuse)
    transcript = isolated_env / "talk.txt"
    transcript.write_text("hello", encoding="utf-8")
    output = isolated_env / "out.md"

    assert entry.main([str(transcript), str(output)]) == 0
    assert output.read_text(encoding="utf-8") == "# hello"
