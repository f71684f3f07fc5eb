"""Tests for path scoring and ranking."""

from lanmap.pack.scoring import rank_paths, score_path


def test_keyword_hint_outweighs_extension_bonus() -> None:
    assert score_path("secret.key") == 24
    assert score_path("readme.md") == 15
    assert rank_paths(["readme.md", "secret.key"], key=str) == ["secret.key", "readme.md"]


def test_hints_are_case_insensitive_and_accumulate() -> None:
    assert score_path("AWS/Credentials.TXT") == 12 + 12 + 3
    assert score_path("srv/data.bin") == 0


def test_system_directory_bonus() -> None:
    assert score_path("root/etc/motd") == 2
    assert score_path("x/home/y.bin") == 2


def test_ties_break_on_path() -> None:
    paths = ["b.bin", "a.bin", "c/notes.txt", "c/a.txt"]
    assert rank_paths(paths, key=str) == ["c/notes.txt", "c/a.txt", "a.bin", "b.bin"]
    assert rank_paths(list(reversed(paths)), key=str) == rank_paths(paths, key=str)
