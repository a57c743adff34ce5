"""JavaScript/TypeScript parsing on top of tree-sitter grammars."""

from pathlib import Path
from typing import Any

from tree_sitter_language_pack import get_language, get_parser

from trxlint.exceptions import JSParseError
from trxlint.utils.constants import JS_EXTENSIONS, TS_EXTENSIONS, TSX_EXTENSIONS
from trxlint.utils.logging import logger

SUPPORTED_LANGUAGES = ("javascript", "typescript", "tsx")


def detect_language(file_path: Path | str) -> str | None:
    """Detect grammar name from file extension."""
    suffix = Path(file_path).suffix.lower()
    if suffix in JS_EXTENSIONS:
        return "javascript"
    if suffix in TS_EXTENSIONS:
        return "typescript"
    if suffix in TSX_EXTENSIONS:
        return "tsx"
    return None


def _first_error_node(node: Any) -> Any | None:
    """Depth-first search for the first ERROR or MISSING node."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


class JSParser:
    """Tree-sitter parser for JS/TS sources.

    Grammars are loaded lazily and kept for the lifetime of the parser so a
    directory walk pays the grammar load once per language.
    """

    def __init__(self):
        self.parsers = {}
        self.languages = {}

    def _parser_for(self, language: str) -> Any:
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")

        if language not in self.parsers:
            try:
                self.languages[language] = get_language(language)
                self.parsers[language] = get_parser(language)
            except Exception as e:
                raise RuntimeError(
                    f"Failed to load tree-sitter grammar for {language}: {e}\n"
                    "This is often due to a corrupted installation.\n"
                    "Please try: pip install --force-reinstall tree-sitter-language-pack"
                ) from e
            logger.debug("Loaded tree-sitter grammar for {lang}", lang=language)

        return self.parsers[language]

    def parse_content(
        self, content: str, language: str = "javascript", file_path: str = "<text>"
    ) -> dict[str, Any]:
        """Parse in-memory source into an AST wrapper.

        Returns:
            Dict with keys ``type`` ("tree_sitter"), ``tree``, ``language``,
            ``content`` and ``source`` (the UTF-8 bytes tree positions refer to).

        Raises:
            JSParseError: If the source contains syntax errors
        """
        source = content.encode("utf-8")
        tree = self._parser_for(language).parse(source)

        if tree.root_node.has_error:
            error_node = _first_error_node(tree.root_node)
            line, column = error_node.start_point if error_node is not None else (0, 0)
            raise JSParseError(
                f"Parsing error: unexpected token at {line + 1}:{column}",
                file_path=file_path,
                line=line + 1,
                column=column,
            )

        return {
            "type": "tree_sitter",
            "tree": tree,
            "language": language,
            "content": content,
            "source": source,
        }

    def parse_file(self, file_path: Path, language: str | None = None) -> dict[str, Any]:
        """Parse a file into an AST wrapper."""
        if language is None:
            language = detect_language(file_path)
        if language is None:
            raise ValueError(f"Not a JavaScript/TypeScript file: {file_path}")

        content = Path(file_path).read_text(encoding="utf-8", errors="replace")
        return self.parse_content(content, language, str(file_path))

    def supports_file(self, file_path: Path | str) -> bool:
        """Check if a file has a JS/TS extension we can parse."""
        return detect_language(file_path) is not None
