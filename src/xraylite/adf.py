"""Atlassian Document Format helpers for rich-text issue fields."""

from typing import Any


def text_to_adf(text: str) -> dict:
    """Wrap plain text in an ADF document, one paragraph per line."""
    paragraphs = []
    for line in text.split("\n"):
        paragraph: dict[str, Any] = {"type": "paragraph", "content": []}
        if line:
            paragraph["content"].append({"type": "text", "text": line})
        paragraphs.append(paragraph)
    return {"type": "doc", "version": 1, "content": paragraphs}


def field_to_text(field_value: Any) -> str:
    """Extract plain text from a Jira field (handles ADF and plain text)."""
    if field_value is None:
        return ""

    if isinstance(field_value, str):
        return field_value

    if isinstance(field_value, dict):
        return adf_to_text(field_value).rstrip("\n")

    return str(field_value)


def adf_to_text(adf: dict) -> str:
    """Convert Atlassian Document Format to plain text."""
    if not isinstance(adf, dict):
        return ""

    content = adf.get("content", [])
    node_type = adf.get("type", "")

    if node_type == "text":
        return adf.get("text", "")
    if node_type == "hardBreak":
        return "\n"

    text = "".join(adf_to_text(node) for node in content)

    # Block-level nodes end with a newline
    if node_type in ("paragraph", "heading"):
        text = text + "\n"
    elif node_type in ("orderedList", "bulletList"):
        text = text + "\n"
    elif node_type == "listItem":
        text = "- " + text.strip() + "\n"
    elif node_type == "codeBlock":
        text = text + "\n"

    return text
