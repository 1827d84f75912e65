"""YAML document loader with integrity hashing."""

import hashlib
from pathlib import Path
from typing import Any

import yaml

# Default rulesets directory
RULESETS_DIR = Path(__file__).parent.parent / "rulesets"


def compute_document_hash(content: str) -> str:
    """Compute SHA256 hash of document content.

    Recorded alongside policy decisions so a table change is traceable.

    Args:
        content: Raw YAML content string

    Returns:
        SHA256 hex digest
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def load_yaml_document(
    filename: str,
    directory: Path | None = None,
) -> tuple[dict[str, Any], str]:
    """Load a YAML file and compute its hash.

    Args:
        filename: Name of the file (e.g., "species-levels-v1.yaml")
        directory: Directory containing the file (defaults to rulesets/)

    Returns:
        Tuple of (parsed document, SHA256 hash)

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    if directory is None:
        directory = RULESETS_DIR

    filepath = directory / filename

    if not filepath.exists():
        raise FileNotFoundError(f"Document not found: {filepath}")

    content = filepath.read_text(encoding="utf-8")
    document = yaml.safe_load(content) or {}

    return document, compute_document_hash(content)
