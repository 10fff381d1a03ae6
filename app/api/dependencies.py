"""
app/api/dependencies.py

Purpose: Request-scoped dependencies

- Acting admin identity from the X-Admin-Id / X-Admin-Name headers
  (authentication happens upstream; the id arrives already resolved)
- The workflow instance built at startup
"""

from typing import Optional

from fastapi import Header, Request

from app.schemas.admin_code_request import AdminIdentity
from app.services.admin_code_service import AdminCodeRequestWorkflow


def get_acting_admin(
    x_admin_id: Optional[str] = Header(default=None),
    x_admin_name: Optional[str] = Header(default=None),
) -> AdminIdentity:
    # Missing ids are rejected by the workflow, not here
    return AdminIdentity(id=x_admin_id, name=x_admin_name)


def get_workflow(request: Request) -> AdminCodeRequestWorkflow:
    workflow = getattr(request.app.state, "workflow", None)
    if workflow is None:
        raise RuntimeError("Workflow not initialized. It is created during application startup.")
    return workflow
