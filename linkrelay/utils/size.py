from __future__ import annotations


_units = ["B", "KB", "MB", "GB", "TB"]


def format_size(size: float) -> str:
    i = 0
    size = float(size)
    while size >= 1024 and i < len(_units) - 1:
        size /= 1024
        i += 1
    return f"{size:.2f} {_units[i]}"
