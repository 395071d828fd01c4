"""
Tests for the ``ontology-typegen`` command line.
"""

import pytest
from click.testing import CliRunner
from conftest import RDFS_CLASS, cls, s

from ontology_typegen.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def ontology_file(tmp_path, schema_nt):
    path = tmp_path / "schema.nt"
    path.write_text(schema_nt, encoding="utf-8")
    return path


class TestGenerate:
    def test_writes_module(self, runner, ontology_file, tmp_path):
        out = tmp_path / "generated" / "schema_types.py"
        result = runner.invoke(cli, ["generate", "--file", str(ontology_file), "-o", str(out)])
        assert result.exit_code == 0, result.output
        source = out.read_text(encoding="utf-8")
        assert "class PersonBase(ThingBase):" in source
        assert "Success" in result.output

    def test_nodeprecated(self, runner, ontology_file, tmp_path):
        out = tmp_path / "schema_types.py"
        result = runner.invoke(cli, ["generate", "--file", str(ontology_file), "--nodeprecated", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "class PatientBase" not in out.read_text(encoding="utf-8")

    def test_named_context(self, runner, ontology_file, tmp_path):
        out = tmp_path / "schema_types.py"
        result = runner.invoke(
            cli,
            ["generate", "--file", str(ontology_file), "--context", "schema:https://schema.org", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert 'Literal["schema:Person"]' in out.read_text(encoding="utf-8")

    def test_context_from_environment(self, runner, ontology_file, tmp_path):
        out = tmp_path / "schema_types.py"
        result = runner.invoke(
            cli,
            ["generate", "--file", str(ontology_file), "-o", str(out)],
            env={"TYPEGEN_CONTEXT": "schema:https://schema.org"},
        )
        assert result.exit_code == 0, result.output
        assert "class JsonLdContext(BaseModel):" in out.read_text(encoding="utf-8")

    def test_verbose_prints_diagnostics(self, runner, ontology_file, tmp_path):
        out = tmp_path / "schema_types.py"
        result = runner.invoke(cli, ["generate", "--file", str(ontology_file), "--verbose", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "[unrecognized]" in result.output


class TestFailures:
    def test_bad_context(self, runner, ontology_file, tmp_path):
        out = tmp_path / "schema_types.py"
        result = runner.invoke(
            cli,
            ["generate", "--file", str(ontology_file), "--context", "schema:ftp://schema.org", "-o", str(out)],
        )
        assert result.exit_code == 1
        assert "Failed" in result.output
        assert not out.exists()

    def test_fatal_ontology_error(self, runner, tmp_path):
        path = tmp_path / "broken.nt"
        path.write_text(cls("Person", "Thing") + "\n", encoding="utf-8")
        out = tmp_path / "schema_types.py"
        result = runner.invoke(cli, ["generate", "--file", str(path), "-o", str(out)])
        assert result.exit_code == 1
        assert "Failed" in result.output
        assert not out.exists()

    def test_literal_type_is_malformed(self, runner, tmp_path):
        path = tmp_path / "broken.nt"
        path.write_text(
            f'{s("Thing")} <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> "Class" .\n'
            f"{s('Person')} <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> {RDFS_CLASS} .\n",
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["generate", "--file", str(path), "-o", str(tmp_path / "out.py")])
        assert result.exit_code == 1
        assert "Failed" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["generate", "--file", str(tmp_path / "missing.nt")])
        assert result.exit_code == 2
