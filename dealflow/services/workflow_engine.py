"""Workflow engine instance wired to the default deal adapter."""

from dealflow.services.workflow_engine_adapters import DefaultWorkflowDomainAdapter
from dealflow.services.workflow_engine_core import WorkflowEngineCore

engine = WorkflowEngineCore(DefaultWorkflowDomainAdapter())
