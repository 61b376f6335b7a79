"""File type tables: which files count as text context and which may be uploaded."""

from pathlib import PurePosixPath
from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern


TEXT_EXTENSIONS: dict[str, list[str]] = {
    "documents": [
        ".txt", ".md", ".rtf", ".log", ".doc", ".docx", ".odt",
        ".pdf", ".tex", ".epub",
    ],
    "code": [
        # Web
        ".html", ".css", ".js", ".jsx", ".ts", ".tsx",
        ".vue", ".svelte", ".php", ".asp", ".jsp",
        # Programming languages
        ".py", ".java", ".cpp", ".c", ".h", ".cs", ".rb",
        ".go", ".rs", ".swift", ".kt", ".scala", ".r",
        # Shell/Scripts
        ".sh", ".bash", ".ps1", ".bat", ".cmd",
    ],
    "data": [
        ".json", ".yaml", ".yml", ".xml", ".csv", ".tsv",
        ".ini", ".conf", ".config", ".env", ".properties",
        ".xls", ".xlsx", ".ods",
    ],
    "web_assets": [
        ".svg", ".htm", ".xhtml", ".less", ".sass", ".scss",
        ".graphql", ".gql", ".wasm",
    ],
    "config": [
        ".toml", ".editorconfig", ".gitignore", ".npmrc",
        ".eslintrc", ".prettierrc", ".babelrc",
    ],
    "database": [
        ".sql", ".prisma", ".sqllite", ".mdb",
    ],
}

SUPPORTED_BINARY_EXTENSIONS: list[str] = [
    # Microsoft Office
    ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    # OpenDocument
    ".odt", ".ods", ".odp",
    ".pdf",
    # Archives
    ".zip", ".rar", ".7z", ".tar", ".gz",
    # Images
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg",
    ".epub", ".mobi",
]

MIME_TYPES: dict[str, str] = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".csv": "text/csv",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ods": "application/vnd.oasis.opendocument.spreadsheet",
    ".json": "application/json",
    ".xml": "application/xml",
    ".yaml": "application/yaml",
    ".yml": "application/yaml",
    ".js": "text/javascript",
    ".ts": "text/typescript",
    ".py": "text/x-python",
    ".java": "text/x-java-source",
    ".html": "text/html",
    ".css": "text/css",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def _extension_spec(extensions: list[str]) -> PathSpec:
    """Build a spec matching ``*.ext`` anywhere, plus bare dotfiles like ``.gitignore``."""
    patterns: list[str] = []
    for ext in extensions:
        patterns.append(f"*{ext}")
        patterns.append(ext)
    return PathSpec.from_lines(GitWildMatchPattern, patterns)


_TEXT_SPEC = _extension_spec(sorted({e for group in TEXT_EXTENSIONS.values() for e in group}))
_BINARY_SPEC = _extension_spec(SUPPORTED_BINARY_EXTENSIONS)


def _file_name(file_path: str) -> str:
    return PurePosixPath(file_path.replace("\\", "/")).name.lower()


def is_text_file(file_path: str) -> bool:
    """True when the file's extension is in the text-like allowlist."""
    name = _file_name(file_path)
    return bool(name) and _TEXT_SPEC.match_file(name)


def is_supported_binary_file(file_path: str) -> bool:
    """True for document/archive/image formats accepted for upload."""
    name = _file_name(file_path)
    return bool(name) and _BINARY_SPEC.match_file(name)


def is_upload_allowed(file_path: str) -> bool:
    return is_text_file(file_path) or is_supported_binary_file(file_path)


def mime_type(file_path: str) -> str:
    suffix = PurePosixPath(_file_name(file_path)).suffix
    return MIME_TYPES.get(suffix, DEFAULT_MIME_TYPE)


def format_file_size(size_bytes: int) -> str:
    """Human readable size, e.g. ``1536`` -> ``"1.50 KB"``."""
    units = ["B", "KB", "MB", "GB"]
    size = float(size_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    return f"{size:.2f} {units[unit_index]}"
