"""
Lazy Table Container

Mapping of table name to Table whose entries are loaded on first access.
Read handlers back a Schema with one of these so that reading an archive
only touches the tables a caller actually asks for.

A loader signals a table that can no longer be produced (expired, removed)
with a KeyError. The name is then dropped from the container and the
message kept for get_errors().
"""
from __future__ import annotations

from collections.abc import MutableMapping
from typing import Callable, Dict, Iterable, Iterator, List

from .models import Table
from .utils import format_error_message, get_logger

logger = get_logger(__name__)

# Loads one table by name; raises when the table cannot be produced
TableLoader = Callable[[str], Table]


class LazyTableContainer(MutableMapping):
    """
    Table container populated on demand

    Table names are known up front; ``loader`` is called once per table,
    the first time it is accessed.
    """

    def __init__(self, names: Iterable[str], loader: TableLoader):
        self._names: List[str] = list(names)
        self._loader = loader
        self._loaded: Dict[str, Table] = {}
        self.errors: List[str] = []

    def __getitem__(self, name: str) -> Table:
        if name in self._loaded:
            return self._loaded[name]
        if name not in self._names:
            raise KeyError(name)

        logger.debug(f"Loading table {name} on first access")
        try:
            table = self._loader(name)
        except KeyError as e:
            self._names.remove(name)
            message = format_error_message(e)
            logger.warning(f"Dropping table {name}: {message}")
            self.errors.append(message)
            raise

        self._loaded[name] = table
        return table

    def __setitem__(self, name: str, table: Table) -> None:
        if name not in self._names:
            self._names.append(name)
        self._loaded[name] = table

    def __delitem__(self, name: str) -> None:
        if name not in self._names:
            raise KeyError(name)
        self._names.remove(name)
        self._loaded.pop(name, None)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __repr__(self) -> str:
        return (
            f"LazyTableContainer(tables={len(self._names)}, "
            f"loaded={len(self._loaded)})"
        )

    def is_loaded(self, name: str) -> bool:
        """Whether a table has been materialized yet"""
        return name in self._loaded

    def get_errors(self) -> List[str]:
        """Return and clear messages for tables that failed to load"""
        errors = self.errors
        self.errors = []
        return errors

    @property
    def loaded_count(self) -> int:
        return len(self._loaded)
