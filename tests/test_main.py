"""Tests for the command line entry point."""

import argparse

from agent_coordination import main as cli

from conftest import LEARNING_PLAN_REPLY, intent_reply


def test_cli_arguments_win(monkeypatch):
    monkeypatch.delenv("LLM_PROVIDER", raising=False)
    args = argparse.Namespace(provider="openai", model="gpt-x")
    yaml_config = {"llm": {"provider": "anthropic", "model": "claude"}}
    assert cli.get_provider_and_model(args, yaml_config) == ("openai", "gpt-x")


def test_yaml_used_when_no_arguments():
    args = argparse.Namespace(provider=None, model=None)
    yaml_config = {"llm": {"provider": "together", "model": "llama"}}
    assert cli.get_provider_and_model(args, yaml_config) == ("together", "llama")


def test_one_shot_dialog_answers_follow_up(make_system, monkeypatch, capsys):
    """Test that a one-shot command feeds answers back until the user stops."""
    system = make_system([
        intent_reply("generateLearningPlan", requires_follow_up=True, questions=["On which topic?"]),
        intent_reply("generateLearningPlan", {"topic": "digital rights"}),
        "Thanks.",
        LEARNING_PLAN_REPLY,
    ])
    answers = iter(["digital rights", ""])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))

    cli.run_dialog(system, "Make me a learning plan", "u1", "en-US")

    output = capsys.readouterr().out
    assert "On which topic?" in output
    assert "Learning path: digital rights" in output
    assert len(system.get_workflow_status()) == 2


def test_interrupt_ends_dialog(make_system, monkeypatch):
    system = make_system()

    def interrupted(prompt):
        raise KeyboardInterrupt

    monkeypatch.setattr("builtins.input", interrupted)
    cli.run_dialog(system, None, "u1", "de-DE")
    assert system.get_workflow_status() == []
