"""
Smoke tests for the command line entry point.
"""

from afrobarometer.cli import run_cli

from conftest import place_round_files


def test_init_creates_layout(tmp_path, capsys):
    root = tmp_path / "cli"
    assert run_cli(["--data-dir", str(root), "init"]) == 0
    assert (root / "questionnaires").is_dir()
    assert str(root.resolve()) in capsys.readouterr().out


def test_build_list_show(data_dir, capsys):
    place_round_files(data_dir, 3)
    root = str(data_dir.root)

    assert run_cli(["--data-dir", root, "build", "--rounds", "3"]) == 0
    assert run_cli(["--data-dir", root, "list"]) == 0
    assert "afrb_3.parquet" in capsys.readouterr().out

    assert run_cli(["--data-dir", root, "show", "3", "--rows", "2"]) == 0
    assert "[3 rows x 5 columns]" in capsys.readouterr().out


def test_show_unbuilt_round_fails(data_dir):
    assert run_cli(["--data-dir", str(data_dir.root), "show", "4"]) == 1


def test_rebuild_without_overwrite_fails(data_dir):
    place_round_files(data_dir, 3)
    root = str(data_dir.root)
    assert run_cli(["--data-dir", root, "build", "--rounds", "3"]) == 0
    assert run_cli(["--data-dir", root, "build", "--rounds", "3"]) == 1


def test_init_with_positional_path(tmp_path, capsys):
    root = tmp_path / "positional"
    assert run_cli(["init", str(root)]) == 0
    assert (root / "codebooks").is_dir()
    assert str(root.resolve()) in capsys.readouterr().out


def test_data_dir_pointing_at_file_fails_cleanly(tmp_path):
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("x")
    assert run_cli(["--data-dir", str(not_a_dir), "list"]) == 1
