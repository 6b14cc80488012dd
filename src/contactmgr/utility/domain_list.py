import json
import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def parse_domain_text(content: str) -> List[str]:
    """One domain per line. Blank lines and lines starting with # are skipped."""
    domains = []
    for line in content.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            domains.append(line)
    return domains


def parse_domain_json(content: str) -> List[str]:
    """A JSON array of domain names, or of objects with a `domain` or `name` key."""
    data = json.loads(content)
    if not isinstance(data, list):
        return []

    domains = []
    for item in data:
        if isinstance(item, str):
            name = item
        elif isinstance(item, dict):
            name = item.get("domain") or item.get("name")
        else:
            name = None
        if name:
            domains.append(name)
    return domains


def parse_domain_file(file_path) -> List[str]:
    """Reads a domain list from a .json file or a plain text file.

    Raises:
        ValueError: the file ends in .json but is not valid JSON.
        OSError: the file cannot be read.
    """
    file_path = Path(file_path)
    content = file_path.read_text(encoding="utf-8")

    if file_path.suffix.lower() == ".json":
        try:
            return parse_domain_json(content)
        except json.JSONDecodeError as err:
            raise ValueError(f"Invalid JSON format in {file_path}") from err

    return parse_domain_text(content)
