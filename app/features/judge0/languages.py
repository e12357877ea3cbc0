"""Supported source languages and their fixed Judge0 language ids."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Union

from app.common.errors import UnsupportedLanguageError


class Language(str, Enum):
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JAVA = "java"
    TYPESCRIPT = "typescript"


WrapStrategy = Callable[[str, str], str]


@dataclass(frozen=True)
class LanguageSpec:
    language: Language
    judge0_id: int
    name: str
    wrap: WrapStrategy

    @property
    def key(self) -> str:
        return self.language.value


def _registry() -> Dict[Language, LanguageSpec]:
    # wrappers imports Language from here; bind lazily to keep the import graph acyclic
    from app.features.judge0 import wrappers

    return {
        Language.JAVASCRIPT: LanguageSpec(Language.JAVASCRIPT, 63, "JavaScript (Node.js 12.14.0)", wrappers.wrap_javascript),
        Language.PYTHON: LanguageSpec(Language.PYTHON, 71, "Python (3.8.1)", wrappers.wrap_python),
        Language.JAVA: LanguageSpec(Language.JAVA, 62, "Java (OpenJDK 13.0.1)", wrappers.wrap_java),
        Language.TYPESCRIPT: LanguageSpec(Language.TYPESCRIPT, 74, "TypeScript (3.7.4)", wrappers.wrap_typescript),
    }


def resolve_language(value: Union[str, Language, LanguageSpec]) -> LanguageSpec:
    """Select the language spec once; unknown keys raise UnsupportedLanguageError."""
    if isinstance(value, LanguageSpec):
        return value
    if isinstance(value, Language):
        return _registry()[value]
    key = (value or "").strip().lower() if isinstance(value, str) else ""
    try:
        language = Language(key)
    except ValueError:
        raise UnsupportedLanguageError(value) from None
    return _registry()[language]


def supported_languages() -> List[LanguageSpec]:
    return list(_registry().values())


__all__ = ["Language", "LanguageSpec", "resolve_language", "supported_languages"]
