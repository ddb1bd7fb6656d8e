"""
Unit tests for checklist loading.
"""

import json

import pytest

from hostcheck._loading import load_checklist, parse_checklist, read_checklist
from hostcheck._types import CheckSpec
from hostcheck.errors import ChecklistError


@pytest.mark.unit
class TestParseChecklist:
    """Test schema validation and variable resolution."""

    def test_basic_document(self) -> None:
        loaded = parse_checklist(
            {
                "name": "web tier",
                "checklist": [
                    {"id": "Port", "parameters": ["80"], "title": "http"},
                    {"id": "Host", "parameters": ["eff.org"]},
                ],
            }
        )
        assert loaded.name == "web tier"
        assert loaded.specs == [
            CheckSpec(check_id="Port", parameters=("80",), title="http"),
            CheckSpec(check_id="Host", parameters=("eff.org",)),
        ]

    def test_capitalised_keys(self) -> None:
        loaded = parse_checklist(
            {"Name": "Base", "Checklist": [{"ID": "Installed", "Parameters": ["openssh-server"]}]}
        )
        assert loaded.name == "Base"
        assert loaded.specs[0].check_id == "Installed"

    def test_scalars_coerced_to_strings(self) -> None:
        loaded = parse_checklist(
            {"checklist": [{"id": "Port", "parameters": 22}, {"id": "PHPConfig", "parameters": ["short_open_tag", False]}]}
        )
        assert loaded.specs[0].parameters == ("22",)
        assert loaded.specs[1].parameters == ("short_open_tag", "false")

    def test_missing_parameters_default_empty(self) -> None:
        loaded = parse_checklist({"checklist": [{"id": "Gateway"}]})
        assert loaded.specs[0].parameters == ()

    def test_variables_and_overrides(self) -> None:
        data = {
            "variables": {"host": "eff.org", "port": 80},
            "checklist": [{"id": "TCP", "parameters": ["{{ host }}:{{port}}"]}],
        }
        assert parse_checklist(data).specs[0].parameters == ("eff.org:80",)
        overridden = parse_checklist(data, cli_overrides={"port": "443"})
        assert overridden.specs[0].parameters == ("eff.org:443",)

    def test_undefined_variables_collected(self) -> None:
        data = {
            "checklist": [
                {"id": "Host", "parameters": ["{{ dns_name }}"]},
                {"id": "Port", "parameters": ["{{ port }}"]},
            ]
        }
        with pytest.raises(ChecklistError) as exc_info:
            parse_checklist(data, source="vars.yml")
        assert len(exc_info.value.errors) == 2
        assert "'dns_name'" in exc_info.value.errors[0]

    def test_unknown_entry_key_rejected(self) -> None:
        with pytest.raises(ChecklistError, match="invalid checklist") as exc_info:
            parse_checklist({"checklist": [{"id": "Port", "params": ["80"]}]})
        assert any("params" in err for err in exc_info.value.errors)

    def test_nested_parameter_rejected(self) -> None:
        with pytest.raises(ChecklistError):
            parse_checklist({"checklist": [{"id": "Port", "parameters": [["80"]]}]})

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ChecklistError, match="must be a mapping"):
            parse_checklist(["Port", "80"])


@pytest.mark.unit
class TestLoadChecklist:
    """Test reading checklist files and directories."""

    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "base.yml"
        path.write_text(
            "name: base\n"
            "checklist:\n"
            "  - id: Running\n"
            "    parameters: [sshd]\n"
            "  - id: SystemctlActive\n"
            "    parameters: [ssh.service]\n"
        )
        loaded = load_checklist(path)
        assert [s.check_id for s in loaded.specs] == ["Running", "SystemctlActive"]
        assert loaded.sources == [str(path)]

    def test_json_file(self, tmp_path) -> None:
        path = tmp_path / "base.json"
        path.write_text(json.dumps({"Name": "Base", "Checklist": [{"ID": "Up", "Parameters": ["lo"]}]}))
        assert load_checklist(path).specs[0] == CheckSpec(check_id="Up", parameters=("lo",))

    def test_directory_sorted_and_recursive(self, tmp_path) -> None:
        (tmp_path / "b.yaml").write_text("checklist:\n  - id: Host\n    parameters: [eff.org]\n")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "c.yml").write_text("checklist:\n  - id: Up\n    parameters: [lo]\n")
        (tmp_path / "a.yml").write_text("checklist:\n  - id: Port\n    parameters: [22]\n")
        (tmp_path / "notes.txt").write_text("ignored")

        loaded = load_checklist(tmp_path)
        assert [s.check_id for s in loaded.specs] == ["Port", "Host", "Up"]
        assert loaded.name == tmp_path.name

    def test_directory_with_one_named_checklist(self, tmp_path) -> None:
        (tmp_path / "only.yml").write_text("name: only\nchecklist:\n  - id: Up\n    parameters: [lo]\n")
        assert load_checklist(tmp_path).name == "only"

    def test_missing_path(self, tmp_path) -> None:
        with pytest.raises(ChecklistError, match="not found"):
            load_checklist(tmp_path / "nope.yml")

    def test_empty_directory(self, tmp_path) -> None:
        with pytest.raises(ChecklistError, match="No checklist files"):
            load_checklist(tmp_path)

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "empty.yml"
        path.write_text("")
        with pytest.raises(ChecklistError, match="is empty"):
            read_checklist(path)

    def test_malformed_yaml(self, tmp_path) -> None:
        path = tmp_path / "bad.yml"
        path.write_text("checklist: [\n")
        with pytest.raises(ChecklistError, match="Malformed checklist"):
            read_checklist(path)
