"""Reconciliation services for the CheManager resource."""

from che_gateway_operator.services.controller import CheManagerReconciler, ReconcileResult
from che_gateway_operator.services.entrypoint import EntryPointReconciler
from che_gateway_operator.services.gateway import CheGateway
from che_gateway_operator.services.phase import PhaseDecision, next_phase
from che_gateway_operator.services.sync import DiffOptions, Syncer

__all__ = [
    "CheGateway",
    "CheManagerReconciler",
    "DiffOptions",
    "EntryPointReconciler",
    "PhaseDecision",
    "ReconcileResult",
    "Syncer",
    "next_phase",
]
