# tests/helpers.py
from pathlib import Path


def write_lines(path: Path, lines) -> Path:
    """Write raw file content line by line, creating parent directories"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path


def read_lines(path: Path):
    return path.read_text(encoding="utf-8").splitlines()
