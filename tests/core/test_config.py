import pytest

from docstruct.config import StructureConfig
from docstruct.constants import DEFAULT_PATTERNS


def test_defaults():
    config = StructureConfig()

    assert config.line_tolerance == 5.0
    assert config.paragraph_gap == 20.0
    assert config.level_ratios == (1.8, 1.5, 1.3, 1.1)
    assert config.reading_order_page_stride == 10000
    assert config.dedupe_reading_order is False
    assert config.patterns is DEFAULT_PATTERNS


def test_level_ratios_normalized_to_tuple():
    assert StructureConfig(level_ratios=[2.0, 1.5]).level_ratios == (2.0, 1.5)


def test_invalid_worker_count():
    with pytest.raises(ValueError):
        StructureConfig(max_workers=0)


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("DOCSTRUCT_MAX_WORKERS", "8")
    monkeypatch.setenv("DOCSTRUCT_PARAGRAPH_GAP", "24.5")
    monkeypatch.setenv("DOCSTRUCT_SHOW_PROGRESS", "yes")
    monkeypatch.setenv("DOCSTRUCT_LEVEL_RATIOS", "2.0, 1.6,1.2")
    monkeypatch.setenv("DOCSTRUCT_DEDUPE_READING_ORDER", "true")

    config = StructureConfig.from_env(dotenv_path=str(tmp_path / "missing.env"))

    assert config.max_workers == 8
    assert config.paragraph_gap == 24.5
    assert config.show_progress is True
    assert config.level_ratios == (2.0, 1.6, 1.2)
    assert config.dedupe_reading_order is True


def test_from_env_overrides_win(monkeypatch, tmp_path):
    monkeypatch.setenv("DOCSTRUCT_MAX_WORKERS", "8")

    config = StructureConfig.from_env(dotenv_path=str(tmp_path / "missing.env"), max_workers=2)

    assert config.max_workers == 2


def test_from_env_reads_dotenv_file(monkeypatch, tmp_path):
    # registered so teardown removes the value load_dotenv writes
    monkeypatch.setenv("DOCSTRUCT_MIN_TABLE_ROWS", "0")
    monkeypatch.delenv("DOCSTRUCT_MIN_TABLE_ROWS")
    env_file = tmp_path / ".env"
    env_file.write_text("DOCSTRUCT_MIN_TABLE_ROWS=4\n")

    config = StructureConfig.from_env(dotenv_path=str(env_file))

    assert config.min_table_rows == 4


def test_from_env_rejects_bad_numbers(monkeypatch, tmp_path):
    monkeypatch.setenv("DOCSTRUCT_LINE_TOLERANCE", "wide")

    with pytest.raises(ValueError):
        StructureConfig.from_env(dotenv_path=str(tmp_path / "missing.env"))
