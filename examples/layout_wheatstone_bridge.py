"""Example pipeline: detect motifs in a Wheatstone bridge and lay it out."""

from circuit_layout import CircuitTopology, LayoutOptions, calculate_layout, collapse_patterns, find_patterns
from circuit_layout.validate import topological_branches

TOPOLOGY = {
    "nodes": [
        {"id": "top", "connectedBranchIds": ["V1", "R1", "R2"]},
        {"id": "left", "connectedBranchIds": ["R1", "R3", "R5"]},
        {"id": "right", "connectedBranchIds": ["R2", "R4", "R5"]},
        {"id": "bottom", "connectedBranchIds": ["V1", "R3", "R4", "I1"]},
        {"id": "sense", "connectedBranchIds": ["I1"]},
    ],
    "branches": [
        {"id": "V1", "type": "voltageSource", "value": 5, "fromNodeId": "bottom", "toNodeId": "top"},
        {"id": "R1", "type": "resistor", "value": 100, "fromNodeId": "top", "toNodeId": "left"},
        {"id": "R2", "type": "resistor", "value": 120, "fromNodeId": "top", "toNodeId": "right"},
        {"id": "R3", "type": "resistor", "value": 100, "fromNodeId": "left", "toNodeId": "bottom"},
        {"id": "R4", "type": "resistor", "value": 120, "fromNodeId": "right", "toNodeId": "bottom"},
        {"id": "R5", "type": "resistor", "value": 470, "fromNodeId": "left", "toNodeId": "right"},
        {"id": "I1", "type": "currentSource", "value": 0.001, "fromNodeId": "sense", "toNodeId": "bottom"},
    ],
}


def main() -> None:
    topology = CircuitTopology.from_dict(TOPOLOGY)
    branches = topological_branches(topology.branches)

    patterns = find_patterns(topology.nodes, branches)
    print("Patterns:")
    for pattern in patterns:
        print(f"  {pattern.kind.value}: nodes={pattern.nodes} branches={pattern.branches}")
    simplified = collapse_patterns(topology.nodes, branches, patterns)
    print(f"Reduced graph: {len(simplified.placement_nodes())} node(s), {len(simplified.branches)} branch(es)")

    layout = calculate_layout(topology, LayoutOptions(random_seed=123))
    print(f"\nLayout {layout.width:.1f} x {layout.height:.1f}")
    for node in layout.nodes:
        print(f"{node.id}: ({node.x:.2f}, {node.y:.2f}) label at ({node.label_pos.x:.1f}, {node.label_pos.y:.1f})")
    for edge in layout.edges:
        kind = "curved" if edge.is_curved else "straight"
        print(f"{edge.id} [{kind}]: {edge.path}")


if __name__ == "__main__":
    main()
