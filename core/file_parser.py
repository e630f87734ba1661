"""
Definition file parsing for IndexDrift.

Index definitions are JSON objects identified by their "name" property.
The name can be overridden from the command line, in which case the
document is rewritten with the new name before comparison or upload.
"""
import json
from pathlib import Path
from typing import Any, Optional
from dataclasses import dataclass


class DefinitionError(ValueError):
    """Raised when a definition file cannot be used."""


@dataclass
class ParsedDefinition:
    """Result of parsing an index definition."""
    name: str
    document: dict
    filename: str
    file_path: Optional[str] = None


def parse_json_document(content: str, source: str = "<content>") -> Any:
    """
    Parse arbitrary JSON text.

    Raises:
        DefinitionError: if the text is not valid JSON
    """
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise DefinitionError(f"Invalid JSON in {source}: {e}") from e


def parse_definition_content(content: str, filename: str, index_name: Optional[str] = None) -> ParsedDefinition:
    """
    Parse definition JSON content.

    Args:
        content: JSON string content
        filename: Original filename, used in error messages
        index_name: Overrides the "name" property when given

    Returns:
        ParsedDefinition with the (possibly renamed) document
    """
    document = parse_json_document(content, filename)

    if not isinstance(document, dict):
        raise DefinitionError(f"Definition in {filename} must be a JSON object")

    if index_name:
        # Copy so the caller's parsed data is left alone
        document = {**document, "name": index_name}
    else:
        name = document.get("name")
        if not isinstance(name, str) or not name.strip():
            raise DefinitionError("Index name is required in the JSON definition")

    return ParsedDefinition(
        name=document["name"],
        document=document,
        filename=filename
    )


def parse_definition_file(file_path: str, index_name: Optional[str] = None) -> ParsedDefinition:
    """
    Parse a definition file from disk.

    Args:
        file_path: Path to the JSON file
        index_name: Overrides the "name" property when given
    """
    path = Path(file_path)

    if not path.is_file():
        raise DefinitionError(f"Definition file not found: {file_path}")

    try:
        content = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise DefinitionError(f"Could not read {file_path}: {e}") from e

    parsed = parse_definition_content(content, path.name, index_name)
    parsed.file_path = str(path.absolute())
    return parsed


def load_json_file(file_path: str) -> Any:
    """Read any JSON document from disk."""
    path = Path(file_path)

    if not path.is_file():
        raise DefinitionError(f"File not found: {file_path}")

    try:
        content = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise DefinitionError(f"Could not read {file_path}: {e}") from e

    return parse_json_document(content, path.name)
