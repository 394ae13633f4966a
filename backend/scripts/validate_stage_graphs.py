"""Script to print and check the configured stage graphs"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bgf_dashboard.domain.stage_graphs import STAGE_GRAPHS, graph_problems


def describe(graph):
    print("=" * 60)
    print(f"GRAPH: {graph.key} (starts at {graph.initial_stage})")
    print("=" * 60)
    for node in graph.stages.values():
        role = node.required_role.value if node.required_role else "-"
        edges = ", ".join(node.next_stages) if node.next_stages else "(terminal)"
        print(f"  {node.id:<22} role={role:<28} status={node.request_status.value}")
        print(f"      -> {edges}")

    problems = graph_problems(graph)
    if problems:
        print("\nPROBLEMS:")
        for problem in problems:
            print(f"  - {problem}")
    else:
        print("\nOK")
    print()
    return problems


if __name__ == "__main__":
    failed = [key for key, graph in STAGE_GRAPHS.items() if describe(graph)]
    sys.exit(1 if failed else 0)
