from pathlib import Path
import pytest
from danfe_tracking.io.paths import derive_output_paths, processed_path_for, PROCESSED_SUFFIX


def test_derive_output_paths_happy_path(tmp_path: Path):
    src = tmp_path / "chaves_dezembro.csv"
    src.write_text("Access Key\n")

    processed, log = derive_output_paths(src)
    assert processed.parent == src.parent
    assert processed.name == f"{src.stem}{PROCESSED_SUFFIX}"
    assert processed.suffix == ".xlsx"
    assert log.parent == src.parent
    assert log.name == f"{src.stem}.log"


def test_derive_output_paths_missing_input_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        derive_output_paths(tmp_path / "missing.xlsx")


def test_processed_path_is_always_a_workbook(tmp_path: Path):
    assert processed_path_for(tmp_path / "keys.csv") == tmp_path / "keys_processed.xlsx"
    assert processed_path_for(tmp_path / "keys.xlsx") == tmp_path / "keys_processed.xlsx"
