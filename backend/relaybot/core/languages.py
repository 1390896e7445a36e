from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class LanguageDef:
    code: str
    name: str


@dataclass(frozen=True)
class LanguageTable:
    """Supported languages, code -> display name, in menu order.

    Built once from settings and never mutated afterwards.
    """

    entries: tuple[LanguageDef, ...]
    by_code: Mapping[str, LanguageDef]

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "LanguageTable":
        entries = tuple(LanguageDef(code=str(code), name=str(name)) for code, name in mapping.items())
        return cls(entries=entries, by_code=MappingProxyType({e.code: e for e in entries}))

    def __contains__(self, code: object) -> bool:
        return code in self.by_code

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def display_name(self, code: str | None) -> str:
        # unknown codes are shown as-is
        if code is None:
            return ""
        lang = self.by_code.get(code)
        return lang.name if lang else code

    def rows(self, per_row: int = 2) -> list[tuple[LanguageDef, ...]]:
        return [self.entries[i:i + per_row] for i in range(0, len(self.entries), per_row)]
