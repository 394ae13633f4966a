"""Stage Graphs - Per-request-type workflow configuration

Each request type owns a directed graph of named stages. A node lists the
stages that may follow it; terminal nodes list none. Types without a graph of
their own use the ``default`` graph. Graphs are immutable data and are checked
for well-formedness when this module is imported.
"""
from collections import deque
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from .enums import RequestStatus, RequestType, UserRole, WorkflowStage
from .errors import StageGraphError

DEFAULT_GRAPH_KEY = "default"


class StageNode(BaseModel):
    """A stage in a stage graph"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    required_role: Optional[UserRole] = Field(None, description="Role expected to act at this stage")
    next_stages: Tuple[str, ...] = ()
    is_terminal: bool = False
    request_status: RequestStatus = Field(..., description="Request status while at this stage")


class StageGraph(BaseModel):
    """Directed graph of stages for one request type"""
    model_config = ConfigDict(frozen=True)

    key: str
    initial_stage: str
    stages: Dict[str, StageNode]

    def get(self, stage_id: str) -> Optional[StageNode]:
        return self.stages.get(stage_id)

    def next_stages(self, stage_id: str) -> List[str]:
        node = self.stages.get(stage_id)
        if node is None or node.is_terminal:
            return []
        return list(node.next_stages)

    @property
    def terminal_stages(self) -> List[str]:
        return [s.id for s in self.stages.values() if s.is_terminal]


# ============================================================================
# Graph construction helpers
# ============================================================================

_EXITS = (WorkflowStage.REJECTED.value, WorkflowStage.CANCELLED.value)


def _node(
    stage: WorkflowStage,
    name: str,
    description: str,
    next_stages: Tuple[WorkflowStage, ...] = (),
    required_role: Optional[UserRole] = None,
    request_status: RequestStatus = RequestStatus.UNDER_REVIEW,
) -> StageNode:
    edges = tuple(s.value for s in next_stages)
    if edges:
        edges = edges + _EXITS
    return StageNode(
        id=stage.value,
        name=name,
        description=description,
        required_role=required_role,
        next_stages=edges,
        is_terminal=not edges,
        request_status=request_status,
    )


def _terminals(label: str) -> List[StageNode]:
    return [
        _node(WorkflowStage.APPROVED, "Approved", f"{label} has been approved",
              request_status=RequestStatus.APPROVED),
        _node(WorkflowStage.REJECTED, "Rejected", f"{label} has been rejected",
              request_status=RequestStatus.REJECTED),
        _node(WorkflowStage.CANCELLED, "Cancelled", f"{label} has been cancelled",
              request_status=RequestStatus.CANCELLED),
    ]


def _graph(key: str, nodes: List[StageNode]) -> StageGraph:
    return StageGraph(
        key=key,
        initial_stage=WorkflowStage.SUBMITTED.value,
        stages={n.id: n for n in nodes},
    )


# ============================================================================
# Graph definitions
# ============================================================================

_DEFAULT = _graph(DEFAULT_GRAPH_KEY, [
    _node(WorkflowStage.SUBMITTED, "Submitted",
          "Request has been submitted and is awaiting initial review",
          (WorkflowStage.INITIAL_REVIEW,),
          request_status=RequestStatus.SUBMITTED),
    _node(WorkflowStage.INITIAL_REVIEW, "Initial Review",
          "Request is being reviewed by a program manager",
          (WorkflowStage.OFFICER_REVIEW,),
          required_role=UserRole.HEAD_OF_PROGRAMS),
    _node(WorkflowStage.OFFICER_REVIEW, "Officer Review",
          "Request is being reviewed by a project officer",
          (WorkflowStage.FINAL_REVIEW,),
          required_role=UserRole.ASSISTANT_PROJECT_OFFICER),
    _node(WorkflowStage.FINAL_REVIEW, "Final Review",
          "Request is undergoing final review by a program manager",
          (WorkflowStage.APPROVED,),
          required_role=UserRole.HEAD_OF_PROGRAMS,
          request_status=RequestStatus.OFFICER_REVIEWED),
    *_terminals("Request"),
])

_SCHOLARSHIP = _graph(RequestType.SCHOLARSHIP.value, [
    _node(WorkflowStage.SUBMITTED, "Submitted",
          "Scholarship request has been submitted and is awaiting initial review",
          (WorkflowStage.INITIAL_REVIEW,),
          request_status=RequestStatus.SUBMITTED),
    _node(WorkflowStage.INITIAL_REVIEW, "Initial Review",
          "Scholarship request is being reviewed by a program manager",
          (WorkflowStage.DOCUMENTATION_REVIEW,),
          required_role=UserRole.HEAD_OF_PROGRAMS),
    _node(WorkflowStage.DOCUMENTATION_REVIEW, "Documentation Review",
          "Scholarship documents are being verified",
          (WorkflowStage.FINANCIAL_REVIEW,),
          required_role=UserRole.ASSISTANT_PROJECT_OFFICER),
    _node(WorkflowStage.FINANCIAL_REVIEW, "Financial Review",
          "Scholarship financial details are being reviewed",
          (WorkflowStage.FINAL_REVIEW,),
          required_role=UserRole.HEAD_OF_PROGRAMS,
          request_status=RequestStatus.OFFICER_REVIEWED),
    _node(WorkflowStage.FINAL_REVIEW, "Final Review",
          "Scholarship request is undergoing final review",
          (WorkflowStage.APPROVED,),
          required_role=UserRole.DIRECTOR,
          request_status=RequestStatus.HOP_REVIEWED),
    *_terminals("Scholarship request"),
])

_GRANT = _graph(RequestType.GRANT.value, [
    _node(WorkflowStage.SUBMITTED, "Submitted",
          "Grant request has been submitted and is awaiting initial review",
          (WorkflowStage.INITIAL_REVIEW,),
          request_status=RequestStatus.SUBMITTED),
    _node(WorkflowStage.INITIAL_REVIEW, "Initial Review",
          "Grant request is being reviewed by a program manager",
          (WorkflowStage.OFFICER_REVIEW,),
          required_role=UserRole.HEAD_OF_PROGRAMS),
    _node(WorkflowStage.OFFICER_REVIEW, "Officer Review",
          "Grant request is being reviewed by a project officer",
          (WorkflowStage.SITE_VISIT, WorkflowStage.COMMITTEE_REVIEW),
          required_role=UserRole.ASSISTANT_PROJECT_OFFICER),
    _node(WorkflowStage.SITE_VISIT, "Site Visit",
          "Site visit is being conducted for the grant request",
          (WorkflowStage.COMMITTEE_REVIEW,),
          required_role=UserRole.ASSISTANT_PROJECT_OFFICER),
    _node(WorkflowStage.COMMITTEE_REVIEW, "Committee Review",
          "Grant request is being reviewed by the grants committee",
          (WorkflowStage.FINAL_REVIEW,),
          required_role=UserRole.HEAD_OF_PROGRAMS,
          request_status=RequestStatus.OFFICER_REVIEWED),
    _node(WorkflowStage.FINAL_REVIEW, "Final Review",
          "Grant request is undergoing final review",
          (WorkflowStage.APPROVED,),
          required_role=UserRole.DIRECTOR,
          request_status=RequestStatus.HOP_REVIEWED),
    *_terminals("Grant request"),
])

STAGE_GRAPHS: Dict[str, StageGraph] = {
    g.key: g for g in (_DEFAULT, _SCHOLARSHIP, _GRANT)
}


# ============================================================================
# Lookup & validation
# ============================================================================

def get_stage_graph(request_type: str) -> StageGraph:
    """Graph for a request type, falling back to the default graph"""
    key = request_type.value if isinstance(request_type, RequestType) else request_type
    return STAGE_GRAPHS.get(key, STAGE_GRAPHS[DEFAULT_GRAPH_KEY])


def graph_problems(graph: StageGraph) -> List[str]:
    """List every well-formedness violation of a graph (empty when valid)"""
    problems: List[str] = []

    if graph.initial_stage not in graph.stages:
        problems.append(f"initial stage '{graph.initial_stage}' is not defined")

    for stage_id, node in graph.stages.items():
        if stage_id != node.id:
            problems.append(f"stage key '{stage_id}' does not match node id '{node.id}'")
        if node.is_terminal and node.next_stages:
            problems.append(f"terminal stage '{stage_id}' has outgoing edges")
        if not node.is_terminal and not node.next_stages:
            problems.append(f"non-terminal stage '{stage_id}' has no outgoing edges")
        for target in node.next_stages:
            if target not in graph.stages:
                problems.append(f"stage '{stage_id}' points to unknown stage '{target}'")

    if graph.initial_stage in graph.stages:
        seen = {graph.initial_stage}
        queue = deque([graph.initial_stage])
        while queue:
            current = graph.stages[queue.popleft()]
            for target in current.next_stages:
                if target in graph.stages and target not in seen:
                    seen.add(target)
                    queue.append(target)
        for stage_id in graph.stages:
            if stage_id not in seen:
                problems.append(f"stage '{stage_id}' is unreachable from '{graph.initial_stage}'")

    return problems


def validate_stage_graphs(graphs: Dict[str, StageGraph]) -> None:
    """Raise StageGraphError if any graph is malformed"""
    if DEFAULT_GRAPH_KEY not in graphs:
        raise StageGraphError("A default stage graph is required")

    errors = {key: graph_problems(g) for key, g in graphs.items()}
    errors = {key: p for key, p in errors.items() if p}
    if errors:
        raise StageGraphError("Stage graph configuration is invalid", details=errors)


validate_stage_graphs(STAGE_GRAPHS)
