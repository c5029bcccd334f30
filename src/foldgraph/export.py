"""Active view export for renderers.

Turns the controller's current active view into renderer input: cytoscape
element definitions, DOT (Graphviz) or Mermaid markup. Expanded groups
become containers (compound parents, clusters, subgraphs); folded groups
become single collapsed nodes. Pure view analysis, no fold state changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from foldgraph.graph.controller import NodeKind
from foldgraph.observability.logging import get_logger

if TYPE_CHECKING:
    from foldgraph.graph.controller import FoldController

log = get_logger(__name__)

COLLAPSED_CLASS = "collapsed-group"

_LEAF_COLOR = "#6366f1"  # indigo
_LEAF_FONT_COLOR = "#ffffff"
_GROUP_COLOR = "#f1f5f9"  # slate-100 container fill
_GROUP_FONT_COLOR = "#475569"
_COLLAPSED_COLOR = "#cbd5e1"  # slate-300
_EDGE_COLOR = "#94a3b8"


@dataclass
class VizNode:
    """A visible node in the exported view."""

    id: str
    label: str
    kind: NodeKind
    parent_id: str | None = None


@dataclass
class VizEdge:
    """A visible edge in the exported view."""

    id: str
    source: str
    target: str


@dataclass
class ViewGraph:
    """Visible part of the graph, ready for rendering."""

    nodes: list[VizNode]
    edges: list[VizEdge]
    folded_groups: list[str] = field(default_factory=list)

    def children_of(self, parent_id: str | None) -> list[VizNode]:
        """Visible nodes directly inside ``parent_id`` (None for top level)."""
        return [n for n in self.nodes if n.parent_id == parent_id]


def build_view_graph(controller: FoldController, *, max_label_length: int = 40) -> ViewGraph:
    """Extract the visible nodes and edges from a controller.

    A visible node's parent is always visible and expanded: if any ancestor
    were folded the node itself would be hidden.

    Args:
        controller: Controller holding the model and fold state.
        max_label_length: Labels longer than this are truncated.

    Returns:
        ViewGraph with nodes and edges sorted by id.
    """
    model = controller.model
    active_nodes = controller.active_node_ids()
    active_edges = controller.active_edge_ids()

    nodes = [
        VizNode(
            id=node_id,
            label=_truncate(model.node(node_id).display_label, max_label_length),
            kind=controller.node_kind(node_id),
            parent_id=model.parent(node_id),
        )
        for node_id in sorted(active_nodes)
    ]
    edges = [
        VizEdge(id=e.id, source=e.source, target=e.target)
        for e in (model.edge(edge_id) for edge_id in sorted(active_edges))
    ]

    log.debug("view_graph_built", nodes=len(nodes), edges=len(edges))
    return ViewGraph(
        nodes=nodes,
        edges=edges,
        folded_groups=controller.registry.folded_groups(),
    )


def to_elements(view: ViewGraph) -> list[dict[str, Any]]:
    """Render a ViewGraph as cytoscape element definitions.

    Nodes carry ``parent`` for compound layout; folded groups get the
    ``collapsed-group`` class.
    """
    elements: list[dict[str, Any]] = []
    for node in view.nodes:
        data: dict[str, Any] = {"id": node.id, "label": node.label}
        if node.parent_id is not None:
            data["parent"] = node.parent_id
        element: dict[str, Any] = {"group": "nodes", "data": data}
        if node.kind is NodeKind.FOLDED_GROUP:
            element["classes"] = COLLAPSED_CLASS
        elements.append(element)

    for edge in view.edges:
        elements.append(
            {
                "group": "edges",
                "data": {"id": edge.id, "source": edge.source, "target": edge.target},
            }
        )
    return elements


def render_dot(view: ViewGraph, *, rankdir: str = "LR") -> str:
    """Render a ViewGraph as DOT (Graphviz) markup.

    Expanded groups become clusters containing their visible children; the
    group node itself is drawn inside its cluster as a folder shape.
    """
    lines = [
        "digraph foldgraph {",
        f"  rankdir={rankdir};",
        '  node [fontname="Helvetica" fontsize=10 style="filled"];',
        f'  edge [color="{_EDGE_COLOR}" arrowhead="normal"];',
        "",
    ]
    lines.extend(_dot_nodes(view, None, indent=1))
    lines.append("")

    for edge in view.edges:
        lines.append(f'  "{_dot_escape(edge.source)}" -> "{_dot_escape(edge.target)}";')

    lines.append("}")
    return "\n".join(lines)


def render_mermaid(view: ViewGraph, *, rankdir: str = "LR") -> str:
    """Render a ViewGraph as Mermaid flowchart markup.

    Expanded groups become subgraphs; Mermaid allows edges to point at a
    subgraph id directly.
    """
    lines = [f"graph {rankdir}"]
    lines.extend(_mermaid_nodes(view, None, indent=1))
    lines.append("")

    for edge in view.edges:
        lines.append(f"  {_mermaid_id(edge.source)} --> {_mermaid_id(edge.target)}")

    lines.append("")
    lines.append(f"  classDef leaf fill:{_LEAF_COLOR},color:{_LEAF_FONT_COLOR}")
    lines.append(f"  classDef collapsed fill:{_COLLAPSED_COLOR},stroke:#333")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _dot_nodes(view: ViewGraph, parent_id: str | None, *, indent: int) -> list[str]:
    pad = "  " * indent
    lines: list[str] = []
    for node in view.children_of(parent_id):
        node_ref = f'"{_dot_escape(node.id)}"'
        label = f'"{_dot_escape(node.label)}"'
        if node.kind is NodeKind.GROUP:
            lines.append(f'{pad}subgraph "cluster_{_dot_escape(node.id)}" {{')
            lines.append(f"{pad}  label={label};")
            lines.append(f'{pad}  style="filled,rounded";')
            lines.append(f'{pad}  fillcolor="{_GROUP_COLOR}";')
            lines.append(f'{pad}  fontcolor="{_GROUP_FONT_COLOR}";')
            lines.append(
                f'{pad}  {node_ref} [shape=folder label={label} fillcolor="{_GROUP_COLOR}"];'
            )
            lines.extend(_dot_nodes(view, node.id, indent=indent + 1))
            lines.append(f"{pad}}}")
        elif node.kind is NodeKind.FOLDED_GROUP:
            lines.append(f'{pad}{node_ref} [shape=box label={label} fillcolor="{_COLLAPSED_COLOR}"];')
        else:
            lines.append(
                f'{pad}{node_ref} [shape=ellipse label={label} '
                f'fillcolor="{_LEAF_COLOR}" fontcolor="{_LEAF_FONT_COLOR}"];'
            )
    return lines


def _mermaid_nodes(view: ViewGraph, parent_id: str | None, *, indent: int) -> list[str]:
    pad = "  " * indent
    lines: list[str] = []
    for node in view.children_of(parent_id):
        safe_id = _mermaid_id(node.id)
        label = _mermaid_escape(node.label)
        if node.kind is NodeKind.GROUP:
            lines.append(f'{pad}subgraph {safe_id}["{label}"]')
            lines.extend(_mermaid_nodes(view, node.id, indent=indent + 1))
            lines.append(f"{pad}end")
        elif node.kind is NodeKind.FOLDED_GROUP:
            lines.append(f'{pad}{safe_id}["{label}"]:::collapsed')
        else:
            lines.append(f'{pad}{safe_id}(["{label}"]):::leaf')
    return lines


def _truncate(text: str, max_len: int) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def _dot_escape(text: str) -> str:
    """Escape special characters for DOT strings."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _mermaid_id(node_id: str) -> str:
    """Convert a node id to a distinct Mermaid-safe identifier.

    Alphanumerics pass through, ``_`` doubles, and any other character becomes
    ``_<hex codepoint>_``, so different node ids never share an identifier.
    """
    parts = []
    for ch in node_id:
        if ch.isascii() and ch.isalnum():
            parts.append(ch)
        elif ch == "_":
            parts.append("__")
        else:
            parts.append(f"_{ord(ch):x}_")
    return "".join(parts)


def _mermaid_escape(text: str) -> str:
    """Escape special characters for Mermaid labels."""
    return text.replace('"', "&quot;").replace("\n", " ")
