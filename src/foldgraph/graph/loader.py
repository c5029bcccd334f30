"""Load graph descriptions from YAML or JSON files."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from foldgraph.graph.errors import GraphFileError
from foldgraph.graph.model import GraphModel
from foldgraph.models import GraphDescription
from foldgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

log = get_logger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


def read_description(path: Path) -> GraphDescription:
    """Read and schema-validate a graph description file.

    Args:
        path: ``.yaml``, ``.yml`` or ``.json`` file.

    Returns:
        Validated description.

    Raises:
        GraphFileError: If the file is missing, unparsable, or doesn't match
            the description schema.
    """
    if not path.exists():
        raise GraphFileError(str(path), "file not found")

    suffix = path.suffix.lower()
    try:
        if suffix in YAML_SUFFIXES:
            with path.open("r", encoding="utf-8") as f:
                data: Any = YAML(typ="safe").load(f)
        elif suffix in JSON_SUFFIXES:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise GraphFileError(str(path), f"unsupported file type '{path.suffix}'")
    except OSError as e:
        raise GraphFileError(str(path), str(e)) from e
    except (YAMLError, json.JSONDecodeError) as e:
        raise GraphFileError(str(path), f"parse error: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise GraphFileError(str(path), "top level must be a mapping with 'nodes' and 'edges'")

    try:
        return GraphDescription.model_validate(data)
    except ValidationError as e:
        raise GraphFileError(str(path), _format_validation_error(e)) from e


def load_graph(path: Path) -> GraphModel:
    """Read a description file and build the validated GraphModel.

    Raises:
        GraphFileError: If the file can't be read or validated.
        InvalidGraphError: If the description is structurally invalid.
    """
    description = read_description(path)
    model = GraphModel.from_description(description)
    log.info(
        "graph_loaded",
        path=str(path),
        nodes=len(model.nodes),
        edges=len(model.edges),
    )
    return model


def _format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into one line per failing field."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
