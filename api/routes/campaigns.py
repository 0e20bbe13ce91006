"""Campaign orchestration endpoints: start, list, status, log, stop."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from delegate.campaign import (
    CampaignOrchestrator,
    InvalidConfiguration,
    OrchestratorError,
    OrchestratorRegistry,
)
from delegate.campaign.fallbacks import complete_session

from ..deps import CampaignServices, get_registry, get_services, require_orchestrator
from .models import (
    CampaignListResponse,
    CampaignLogResponse,
    CampaignStatusResponse,
    CampaignSummary,
    StartCampaignRequest,
    StartCampaignResponse,
    StopCampaignResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

RECENT_FAILURES = 5


def _status(orchestrator: CampaignOrchestrator) -> CampaignStatusResponse:
    status = orchestrator.get_campaign_status()
    timeline = orchestrator.timeline

    resolution = None
    if orchestrator.machine is not None and orchestrator.machine.resolution is not None:
        resolution = orchestrator.machine.resolution.to_dict()
    elif orchestrator.last_report is not None and orchestrator.last_report.resolution is not None:
        resolution = orchestrator.last_report.resolution.to_dict()

    failures = list(orchestrator.failures)[-RECENT_FAILURES:]
    return CampaignStatusResponse(
        session_id=orchestrator.session_id or "",
        is_active=status.is_active,
        is_concluded=orchestrator.is_concluded,
        current_phase=status.current_phase,
        autonomous_actions=status.autonomous_actions,
        next_action_in_ms=status.next_action_in,
        time_remaining=timeline.time_remaining if timeline else None,
        progress_percentage=timeline.progress_percentage if timeline else None,
        timeline=status.timeline,
        resolution=resolution,
        recent_failures=[
            {
                "collaborator": str(f.collaborator),
                "operation": f.operation,
                "error": f.error,
                "timestamp": f.timestamp.isoformat(),
            }
            for f in failures
        ],
    )


@router.post("/start", response_model=StartCampaignResponse)
async def start_campaign(
    request: StartCampaignRequest,
    registry: OrchestratorRegistry = Depends(get_registry),
    services: CampaignServices = Depends(get_services),
):
    """Start autonomous orchestration for a campaign session."""
    session = request.to_session()
    filled = complete_session(session, services.rng)
    if filled:
        logger.info(f"Completed session {session.id} with defaults: {', '.join(filled)}")

    try:
        orchestrator = await registry.start(
            session, request.duration_minutes, start_clock=services.autostart
        )
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrchestratorError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return StartCampaignResponse(session_id=session.id, filled_defaults=filled, status=_status(orchestrator))


@router.get("", response_model=CampaignListResponse)
async def list_campaigns(registry: OrchestratorRegistry = Depends(get_registry)):
    """List every campaign this process has orchestrated."""
    campaigns = []
    for session_id, orchestrator in registry.items():
        status = orchestrator.get_campaign_status()
        campaigns.append(CampaignSummary(
            session_id=session_id,
            is_active=status.is_active,
            current_phase=status.current_phase,
            autonomous_actions=status.autonomous_actions,
        ))
    return CampaignListResponse(campaigns=campaigns)


@router.get("/{session_id}/status", response_model=CampaignStatusResponse)
async def get_campaign_status(session_id: str, registry: OrchestratorRegistry = Depends(get_registry)):
    """Current timeline, phase and action count for a campaign."""
    return _status(require_orchestrator(registry, session_id))


@router.get("/{session_id}/log", response_model=CampaignLogResponse)
async def get_campaign_log(
    session_id: str,
    limit: int | None = Query(default=None, ge=1, le=500),
    registry: OrchestratorRegistry = Depends(get_registry),
):
    """Campaign log entries, oldest first (the most recent ``limit`` if given)."""
    orchestrator = require_orchestrator(registry, session_id)
    log = orchestrator.log
    return CampaignLogResponse(
        session_id=session_id,
        total=len(log),
        entries=log.to_dicts(limit),
    )


@router.post("/{session_id}/stop", response_model=StopCampaignResponse)
async def stop_campaign(session_id: str, registry: OrchestratorRegistry = Depends(get_registry)):
    """Stop orchestrating a campaign. Stopping twice is harmless."""
    orchestrator = require_orchestrator(registry, session_id)
    await registry.stop(session_id)
    return StopCampaignResponse(session_id=session_id, stopped=True, status=_status(orchestrator))
