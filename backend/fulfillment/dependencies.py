"""Request-scoped wiring of workflow collaborators."""
from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .repositories import SqlActivityRecorder, SqlAssociationLookup, SqlEntityStore
from .use_cases.workflow_transitions import WorkflowDeps


def get_workflow_deps(db: Session = Depends(get_db)) -> WorkflowDeps:
    return WorkflowDeps(
        store=SqlEntityStore(db),
        recorder=SqlActivityRecorder(db),
        associations=SqlAssociationLookup(db),
    )
