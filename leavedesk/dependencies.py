"""Shared FastAPI dependencies."""

from fastapi import Request

from leavedesk.leave.workflow import LeaveWorkflow


def get_workflow(request: Request) -> LeaveWorkflow:
    """The application's single LeaveWorkflow (and therefore lock registry)."""
    return request.app.state.leave_workflow
