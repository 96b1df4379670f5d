from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def test_distribution_metadata_has_no_internal_readme():
    pyproject = (ROOT / "pyproject.toml").read_text()

    assert "readme" not in pyproject
    assert "SPEC_FULL" not in pyproject
    assert 'readlater = "readlater.cli.app:app"' in pyproject
