"""Tests for the click commands in decision_council/cli.py."""

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from config.config_loader import PanelMemberConfig
from decision_council.cli import _build_members, main
from decision_council.models import Role


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def matrix_file(tmp_path: Path) -> Path:
    path = tmp_path / "matrix.yaml"
    path.write_text(
        yaml.dump({
            "options": ["Managed Kubernetes", "Stay on VMs"],
            "criteria": [
                {"name": "Cost", "weight": 0.4, "is_benefit": False},
                {"name": "Scalability", "weight": 0.6},
            ],
            "scores": {
                "Managed Kubernetes": {"Cost": 7, "Scalability": 9},
                "Stay on VMs": {"Cost": 3, "Scalability": 4},
            },
        }),
        encoding="utf-8",
    )
    return path


def test_methods_lists_registry(runner):
    result = runner.invoke(main, ["methods"])
    assert result.exit_code == 0, result.output
    assert "topsis" in result.output
    assert "delphi" in result.output


def test_mcda_single_method(runner, matrix_file):
    result = runner.invoke(main, ["mcda", str(matrix_file), "--method", "topsis"])
    assert result.exit_code == 0, result.output
    assert "TOPSIS" in result.output
    assert "Managed Kubernetes" in result.output
    assert "AHP" not in result.output


def test_mcda_all_methods(runner, matrix_file):
    result = runner.invoke(main, ["mcda", str(matrix_file)])
    assert result.exit_code == 0, result.output
    for name in ("WeightedSum", "AHP", "ELECTRE", "TOPSIS", "PROMETHEE", "GreyTheory"):
        assert name in result.output


def test_mcda_rejects_degenerate_matrix(runner, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.dump({"options": ["Only"], "criteria": ["Cost"], "scores": {"Only": {"Cost": 1}}}),
                    encoding="utf-8")
    result = runner.invoke(main, ["mcda", str(path)])
    assert result.exit_code == 1
    assert "Invalid input" in result.output


def test_mcda_rejects_non_mapping(runner, tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    result = runner.invoke(main, ["mcda", str(path)])
    assert result.exit_code == 1
    assert "expected a mapping" in result.output


def test_run_offline_session_saves_transcript(runner, tmp_path):
    result = runner.invoke(
        main,
        ["run", "Should we migrate to Kubernetes?", "--method", "brainstorming",
         "--tool", "swot", "--driver", "echo", "--output", str(tmp_path)],
    )
    assert result.exit_code == 0, result.output
    files = list(tmp_path.glob("*_should-we-migrate-to-kubernetes.md"))
    assert len(files) == 1
    content = files[0].read_text(encoding="utf-8")
    assert "**Method:** brainstorming" in content
    assert "## Outcome" in content


def test_run_matrix_method_offline_reports_synthetic_votes(runner, tmp_path):
    result = runner.invoke(
        main,
        ["run", "Pick a database", "--method", "topsis", "--driver", "echo", "--output", str(tmp_path)],
    )
    assert result.exit_code == 0, result.output
    assert "Recommended:" in result.output
    assert "synthetic" in result.output
    assert len(list(tmp_path.glob("*.md"))) == 1


def test_run_rejects_unknown_method(runner, tmp_path):
    result = runner.invoke(main, ["run", "x", "--method", "six_sigma", "--output", str(tmp_path)])
    assert result.exit_code == 2


def test_build_members_falls_back_to_expert(sample_app_config):
    sample_app_config.panel.append(PanelMemberConfig(name="Wildcard", role="Jester", provider="claude"))
    members = _build_members(sample_app_config)
    assert [(m.name, m.role) for m, _ in members] == [("Chair", Role.MODERATOR), ("Wildcard", Role.EXPERT)]
    assert all(provider == "claude" for _, provider in members)


def test_mcda_rejects_malformed_criteria(runner, tmp_path):
    path = tmp_path / "bad_criteria.yaml"
    path.write_text(yaml.dump({"options": ["A", "B"], "criteria": [["Cost"]], "scores": {}}), encoding="utf-8")
    result = runner.invoke(main, ["mcda", str(path)])
    assert result.exit_code == 1
    assert "Invalid input" in result.output


def test_mcda_string_benefit_flag_is_honoured(runner, tmp_path):
    path = tmp_path / "cost.yaml"
    path.write_text(
        yaml.dump({
            "options": ["Cheap", "Pricey"],
            "criteria": [{"name": "Cost", "is_benefit": "false"}],
            "scores": {"Cheap": {"Cost": 2}, "Pricey": {"Cost": 9}},
        }),
        encoding="utf-8",
    )
    result = runner.invoke(main, ["mcda", str(path), "--method", "topsis"])
    assert result.exit_code == 0, result.output
    assert result.output.index("Cheap") < result.output.index("Pricey")
