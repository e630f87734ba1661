# IndexDrift v0.3.0
"""
Core package for IndexDrift.
Contains the document tree model, comparison logic and definition parsing.
"""
from core.nodes import (
    Node,
    NodeKind,
    ObjectNode,
    ArrayNode,
    ScalarNode,
    NodeStructureError,
    from_python,
    to_python,
    format_node_compact,
)
from core.comparison import (
    diff,
    deep_compare,
    compare_documents,
    compute_node_hash,
    Change,
    ChangeReport,
    ChangeType,
)
from core.file_parser import (
    parse_definition_file,
    parse_definition_content,
    parse_json_document,
    load_json_file,
    ParsedDefinition,
    DefinitionError,
)

__all__ = [
    "Node",
    "NodeKind",
    "ObjectNode",
    "ArrayNode",
    "ScalarNode",
    "NodeStructureError",
    "from_python",
    "to_python",
    "format_node_compact",
    "diff",
    "deep_compare",
    "compare_documents",
    "compute_node_hash",
    "Change",
    "ChangeReport",
    "ChangeType",
    "parse_definition_file",
    "parse_definition_content",
    "parse_json_document",
    "load_json_file",
    "ParsedDefinition",
    "DefinitionError",
]
