from __future__ import annotations

import typing as t
from pathlib import Path


class TomlFile:
    """A TOML file on disk. The contents are read on first access and cached afterwards."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: dict[str, t.Any] | None = None

    def __repr__(self) -> str:
        return f'{type(self).__name__}(path="{self._path}")'

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def value(self) -> dict[str, t.Any]:
        """Returns the parsed contents of the file. Raises #tomli.TOMLDecodeError if the file is not valid TOML."""

        if self._data is None:
            import tomli

            self._data = tomli.loads(self._path.read_text(encoding="utf8"))
        return self._data
