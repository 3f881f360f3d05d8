"""
Projection Export.

Renders a Projection for consumers outside the core:
- DOT for Graphviz, one rank per tier
- a self-contained HTML page drawing the tiers with d3
- JSON for editor integrations
"""

import json
from pathlib import Path
from typing import Dict

from ..core.types import ROOT_KIND, Projection

KIND_COLORS: Dict[str, str] = {
    ROOT_KIND: "#ff9800",
    "process": "#2c3e50",
    "sub-process": "#2980b9",
    "system": "#27ae60",
    "vendor": "#8e44ad",
}

KIND_SHAPES: Dict[str, str] = {
    ROOT_KIND: "box",
    "process": "box",
    "sub-process": "box",
    "system": "ellipse",
    "vendor": "circle",
}


def to_dot(projection: Projection, title: str = "bpmap") -> str:
    """Export a projection as DOT, nodes of equal rank on the same row."""
    lines = [f'digraph "{_escape(title)}" {{']
    lines.append("  rankdir=TB;")
    lines.append("  node [style=filled, fontcolor=white];")
    lines.append("")

    for node in projection.nodes:
        kind = str(node.kind)
        lines.append(
            f'  "{_escape(node.id)}" [label="{_escape(node.name)}", '
            f'shape={KIND_SHAPES.get(kind, "box")}, fillcolor="{KIND_COLORS.get(kind, "#757575")}"];'
        )

    lines.append("")
    for rank, ids in projection.levels().items():
        members = "; ".join(f'"{_escape(node_id)}"' for node_id in ids)
        lines.append(f"  {{ rank=same; {members}; }}  // rank {rank}")

    lines.append("")
    for link in projection.links:
        lines.append(f'  "{_escape(link.source)}" -> "{_escape(link.target)}";')

    lines.append("}")
    return "\n".join(lines)


def to_json(projection: Projection, indent: int = 2) -> str:
    return json.dumps(projection.to_dict(), indent=indent)


def generate_html(projection: Projection, title: str = "bpmap") -> str:
    """Generate a standalone HTML page drawing the projection tier by tier."""
    payload = projection.to_dict()
    payload["colors"] = KIND_COLORS
    return (
        HTML_TEMPLATE
        .replace("__TITLE__", _escape_html(title))
        .replace("__GRAPH_DATA__", json.dumps(payload))
    )


def write_export(projection: Projection, output_path: Path, title: str = "bpmap") -> Path:
    """
    Write a projection to a file, format chosen by suffix.

    Raises:
        ValueError: For suffixes other than .dot, .html and .json.
    """
    output_path = Path(output_path)
    suffix = output_path.suffix.lower()
    if suffix == ".dot":
        content = to_dot(projection, title)
    elif suffix == ".html":
        content = generate_html(projection, title)
    elif suffix == ".json":
        content = to_json(projection)
    else:
        raise ValueError(f"Unsupported format: {output_path.suffix}")

    output_path.write_text(content, encoding="utf-8")
    return output_path


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _escape_html(value: str) -> str:
    return (
        value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    )


HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>__TITLE__</title>
    <script src="https://d3js.org/d3.v7.min.js"></script>
    <style>
        body { margin: 0; font-family: -apple-system, "Segoe UI", Roboto, sans-serif; }
        .link { stroke: #aaa; stroke-width: 1.5; fill: none; }
        .node-label { font-size: 12px; fill: white; pointer-events: none; }
    </style>
</head>
<body>
    <svg id="canvas" width="100%" height="600"></svg>
    <script>
        const data = __GRAPH_DATA__;
        const svg = d3.select("#canvas");
        const width = document.getElementById("canvas").clientWidth || 960;
        const g = svg.append("g");
        svg.call(d3.zoom().scaleExtent([0.1, 8]).on("zoom", (e) => g.attr("transform", e.transform)));

        // Fixed tiers: one row per rank, nodes spread evenly within a row.
        const byId = {};
        Object.entries(data.levels).forEach(([rank, ids]) => {
            const spacing = width / (ids.length + 1);
            ids.forEach((id, i) => { byId[id] = { x: spacing * (i + 1), y: 50 + rank * 110 }; });
        });

        g.selectAll(".link").data(data.links).enter().append("line")
            .attr("class", "link")
            .attr("x1", d => byId[d.source].x).attr("y1", d => byId[d.source].y)
            .attr("x2", d => byId[d.target].x).attr("y2", d => byId[d.target].y);

        const node = g.selectAll(".node").data(data.nodes).enter().append("g")
            .attr("transform", d => `translate(${byId[d.id].x},${byId[d.id].y})`);
        node.append("rect")
            .attr("x", -70).attr("y", -18).attr("width", 140).attr("height", 36)
            .attr("rx", d => (d.kind === "system" || d.kind === "vendor") ? 18 : 5)
            .attr("fill", d => data.colors[d.kind] || "#757575");
        node.append("text").attr("class", "node-label")
            .attr("text-anchor", "middle").attr("dy", 4).text(d => d.name);
    </script>
</body>
</html>
"""
