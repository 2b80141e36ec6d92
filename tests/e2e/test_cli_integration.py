"""End-to-end tests for the patternkit command line."""

import json

import pytest
import yaml

from patternkit.cli.main import build_parser, parse_args


class TestCliBasics:

    def test_no_command(self, run_cli):
        code, _, stderr = run_cli()

        assert code == 1
        assert "No command specified" in stderr

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip()

    def test_invalid_layer_spec_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["layers", "--layer", "sparkle", "x"])

        assert exc_info.value.code == 2

    def test_missing_config_file(self, run_cli, tmp_path):
        code, _, stderr = run_cli("--config", str(tmp_path / "absent.yml"), "chain", "x")

        assert code == 1
        assert stderr.startswith("InvalidConfiguration:")


class TestRegistryCommand:

    def test_cached_and_fresh_entries(self, run_cli):
        code, stdout, _ = run_cli("registry", "--entry", "A:cached", "--entry", "B", "A", "A", "B", "B")

        assert code == 0
        data = json.loads(stdout)
        assert data["registered"] == ["A", "B"]
        same = [row["same_as_previous"] for row in data["resolutions"]]
        assert same == [None, True, None, False]
        assert [row["instance"] for row in data["resolutions"]] == ["A#1", "A#1", "B#2", "B#3"]

    def test_prototype_entry(self, run_cli):
        _, stdout, _ = run_cli("registry", "--entry", "P:prototype", "P", "P")

        rows = json.loads(stdout)["resolutions"]
        assert [row["kind"] for row in rows] == ["prototype", "prototype"]
        assert rows[1]["same_as_previous"] is False

    def test_unknown_key(self, run_cli):
        code, stdout, stderr = run_cli("registry", "--entry", "A", "C")

        assert code == 1
        assert stdout == ""
        assert stderr.startswith("UnknownKey: Key 'C' is not registered")

    def test_duplicate_entry(self, run_cli):
        code, _, stderr = run_cli("registry", "--entry", "A", "--entry", "A:cached", "A")

        assert code == 1
        assert stderr.startswith("DuplicateKey:")

    def test_overwrite_flag(self, run_cli):
        code, stdout, _ = run_cli("registry", "--overwrite", "--entry", "A", "--entry", "A:cached", "A")

        assert code == 0
        assert json.loads(stdout)["resolutions"][0]["cacheable"] is True

    def test_keys_from_stdin(self, run_cli):
        code, stdout, _ = run_cli("registry", "--entry", "A:cached", stdin="A\nA\n")

        assert code == 0
        assert len(json.loads(stdout)["resolutions"]) == 2


class TestChainCommand:

    def test_text_pipeline(self, run_cli):
        code, stdout, _ = run_cli(
            "chain", "--step", "upper", "--step", "trim", "--step", "reject-empty", "  hi  ", "   "
        )

        assert code == 0
        results = json.loads(stdout)["results"]
        assert results[0]["outcome"] == "completed"
        assert results[0]["value"] == "HI"
        assert results[1]["outcome"] == "rejected"
        assert results[1]["handled_by"] == "reject-empty"
        assert results[1]["reason"] == "empty input"

    def test_strict_turns_rejection_into_error(self, run_cli):
        code, _, stderr = run_cli("chain", "--strict", "--step", "trim", "--step", "reject-empty", " ")

        assert code == 1
        assert stderr.startswith("EmptyChainResult:")

    def test_require_handler(self, run_cli):
        _, stdout, _ = run_cli("chain", "--require-handler", "--step", "lower", "ABC")

        result = json.loads(stdout)["results"][0]
        assert result["outcome"] == "unhandled"
        assert result["value"] == "abc"

    def test_configured_require_handler(self, run_cli, monkeypatch):
        monkeypatch.setenv("PATTERNKIT_CHAIN_REQUIRE_HANDLER", "true")

        _, stdout, _ = run_cli("chain", "x")

        assert json.loads(stdout)["results"][0]["outcome"] == "unhandled"

    def test_yaml_output(self, run_cli):
        _, stdout, _ = run_cli("--format", "yaml", "chain", "--step", "collapse-spaces", "a   b")

        assert yaml.safe_load(stdout)["results"][0]["value"] == "a b"

    def test_table_output(self, run_cli):
        _, stdout, _ = run_cli("--format", "table", "chain", "--step", "strip-punctuation", "hi!")

        assert "outcome" in stdout
        assert "completed" in stdout

    def test_output_file(self, run_cli, tmp_path):
        target = tmp_path / "out.json"

        code, stdout, _ = run_cli("--output", str(target), "chain", "x")

        assert code == 0
        assert "Output written to" in stdout
        assert json.loads(target.read_text())["results"][0]["value"] == "x"


class TestLayersCommand:

    def test_layers_in_onion_order(self, run_cli):
        code, stdout, _ = run_cli(
            "layers", "--layer", "prefix=<", "--layer", "suffix=>", "--layer", "upper", "ok"
        )

        assert code == 0
        data = json.loads(stdout)
        assert data["layers"] == ["upper", "suffix=>", "prefix=<"]
        assert data["results"][0]["output"] == "<OK>"

    def test_deny_layer_short_circuits(self, run_cli):
        _, stdout, _ = run_cli("layers", "--layer", "suffix=!", "--layer", "deny=spam", "buy SPAM", "hello")

        outputs = [row["output"] for row in json.loads(stdout)["results"]]
        assert outputs == ["denied: contains 'spam'", "hello!"]

    def test_trace_layer(self, run_cli):
        code, stdout, _ = run_cli("layers", "--layer", "trace=echo", "x")

        assert code == 0
        assert json.loads(stdout)["results"][0]["output"] == "x"


class TestDispatchCommand:

    def test_publish_to_subscribers(self, run_cli):
        code, stdout, _ = run_cli("dispatch", "--subscriber", "alice", "--subscriber", "bob", "e1", "e2")

        assert code == 0
        data = json.loads(stdout)
        assert data["received"] == {"alice": ["e1", "e2"], "bob": ["e1", "e2"]}
        assert data["reports"][0]["delivered"] == ["alice", "bob"]

    def test_exclude_sender(self, run_cli):
        _, stdout, _ = run_cli(
            "dispatch", "--subscriber", "alice", "--subscriber", "bob", "--exclude", "alice", "hi"
        )

        assert json.loads(stdout)["received"] == {"alice": [], "bob": ["hi"]}

    def test_failures_reported(self, run_cli):
        code, stdout, _ = run_cli(
            "dispatch", "--subscriber", "a", "--subscriber", "b", "--subscriber", "c", "--fail", "b", "e"
        )

        assert code == 0
        report = json.loads(stdout)["reports"][0]
        assert report["delivered"] == ["a", "c"]
        assert report["failures"][0]["subscriber_id"] == "b"

    def test_strict_failures(self, run_cli):
        code, _, stderr = run_cli("dispatch", "--strict", "--subscriber", "a", "--fail", "a", "e")

        assert code == 1
        assert stderr.startswith("DeliveryFailed:")

    def test_duplicate_subscriber(self, run_cli):
        code, _, stderr = run_cli("dispatch", "--subscriber", "a", "--subscriber", "a", "e")

        assert code == 1
        assert stderr.startswith("DuplicateSubscriber:")


class TestStateCommand:

    TURNSTILE = ["--transition", "locked:coin:unlocked", "--transition", "unlocked:push:locked"]

    def test_fire_events(self, run_cli):
        code, stdout, _ = run_cli("state", *self.TURNSTILE, "coin", "push", "coin")

        assert code == 0
        data = json.loads(stdout)
        assert data["initial"] == "locked"
        assert [step["to"] for step in data["steps"]] == ["unlocked", "locked", "unlocked"]
        assert data["final"] == "unlocked"

    def test_illegal_event(self, run_cli):
        code, _, stderr = run_cli("state", *self.TURNSTILE, "push")

        assert code == 1
        assert stderr.startswith("IllegalTransition: Event 'push' is not allowed in state 'locked'")

    def test_unknown_initial_state_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["state", *self.TURNSTILE, "--initial", "broken", "coin"])

        assert exc_info.value.code == 2
        assert "--initial: state 'broken'" in capsys.readouterr().err

    def test_conflicting_transitions_are_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["state", *self.TURNSTILE, "--transition", "locked:coin:broken", "coin"])

        assert exc_info.value.code == 2
        assert "'locked:coin' leads to both 'unlocked' and 'broken'" in capsys.readouterr().err

    def test_repeated_identical_transition_is_accepted(self, run_cli):
        code, stdout, _ = run_cli("state", *self.TURNSTILE, "--transition", "locked:coin:unlocked", "coin")

        assert code == 0
        assert json.loads(stdout)["final"] == "unlocked"

    def test_events_from_stdin(self, run_cli):
        code, stdout, _ = run_cli("state", *self.TURNSTILE, "--initial", "unlocked", stdin="push\n")

        assert code == 0
        assert json.loads(stdout)["final"] == "locked"
