"""API routes for the employee transaction review workflow."""

from fastapi import APIRouter, Request

from app.core.dependencies import RequireEmployee, Workspace, get_workspace_registry
from app.domain.models.transaction import FilterPredicate, TransactionStatus
from app.schemas.review import (
    ApproveRequest,
    BatchSubmitResponse,
    FilterRequest,
    RejectRequest,
    ReviewStateResponse,
    SelectionResponse,
    TransactionActionResponse,
    TransactionDetailResponse,
)
from app.services.dashboard_service import DashboardSummary
from app.services.review_workspace import ReviewWorkspace

router = APIRouter(prefix="/review", tags=["review"])


def _state(workspace: ReviewWorkspace) -> ReviewStateResponse:
    predicate = workspace.predicate
    visible = workspace.visible
    return ReviewStateResponse(
        loaded=workspace.store.loaded,
        filter=FilterRequest(
            status=predicate.status,
            date=predicate.date,
            beneficiary_text=predicate.beneficiary_text,
        ),
        visible=visible,
        visible_count=len(visible),
        total_count=len(workspace.store),
        selected_ids=[t.id for t in visible if t.id in workspace.selection],
        all_selected=workspace.all_selected,
        can_submit=workspace.can_submit,
        submitting=workspace.submitting,
        in_flight_ids=sorted(workspace.in_flight_ids),
    )


def _selection(workspace: ReviewWorkspace) -> SelectionResponse:
    return SelectionResponse(
        selected_ids=[t_id for t_id in workspace.visible_ids if t_id in workspace.selection],
        all_selected=workspace.all_selected,
        can_submit=workspace.can_submit,
    )


@router.post("/load", response_model=ReviewStateResponse)
async def load_transactions(workspace: Workspace) -> ReviewStateResponse:
    """Fetch all transactions from the payments backend and rebuild the view."""
    await workspace.load()
    return _state(workspace)


@router.get("/state", response_model=ReviewStateResponse)
async def get_state(workspace: Workspace) -> ReviewStateResponse:
    """Return the current view without contacting the backend."""
    return _state(workspace)


@router.put("/filter", response_model=ReviewStateResponse)
async def set_filter(request: FilterRequest, workspace: Workspace) -> ReviewStateResponse:
    """Replace the active filter. Selected transactions that drop out are deselected."""
    workspace.set_filter(FilterPredicate(**request.model_dump()))
    return _state(workspace)


@router.post("/selection/toggle/{transaction_id}", response_model=SelectionResponse)
async def toggle_selection(transaction_id: str, workspace: Workspace) -> SelectionResponse:
    workspace.toggle(transaction_id)
    return _selection(workspace)


@router.post("/selection/select-all", response_model=SelectionResponse)
async def select_all(workspace: Workspace) -> SelectionResponse:
    """Select every visible transaction, or clear if they are all selected already."""
    workspace.select_all()
    return _selection(workspace)


@router.delete("/selection", response_model=SelectionResponse)
async def clear_selection(workspace: Workspace) -> SelectionResponse:
    workspace.clear_selection()
    return _selection(workspace)


@router.get("/transactions/{transaction_id}", response_model=TransactionDetailResponse)
async def get_transaction_detail(
    transaction_id: str, workspace: Workspace
) -> TransactionDetailResponse:
    """Fetch a single transaction for the detail view."""
    session = await workspace.open_detail(transaction_id)
    transaction = session.transaction
    return TransactionDetailResponse(
        transaction=transaction,
        can_act=transaction.status == TransactionStatus.PENDING
        and not workspace.is_in_flight(transaction_id),
    )


@router.delete("/transactions/{transaction_id}", status_code=204)
async def close_transaction_detail(transaction_id: str, workspace: Workspace) -> None:
    workspace.close_detail(transaction_id)


@router.post("/transactions/{transaction_id}/approve", response_model=TransactionActionResponse)
async def approve_transaction(
    transaction_id: str,
    workspace: Workspace,
    request: ApproveRequest | None = None,
) -> TransactionActionResponse:
    """Approve a pending transaction."""
    note = request.note if request else ""
    updated = await workspace.approve(transaction_id, note)
    return TransactionActionResponse(
        transaction_id=transaction_id, applied=updated is not None, transaction=updated
    )


@router.post("/transactions/{transaction_id}/reject", response_model=TransactionActionResponse)
async def reject_transaction(
    transaction_id: str,
    request: RejectRequest,
    workspace: Workspace,
) -> TransactionActionResponse:
    """Reject a pending transaction. A non-blank reason is required."""
    updated = await workspace.reject(transaction_id, request.reason)
    return TransactionActionResponse(
        transaction_id=transaction_id, applied=updated is not None, transaction=updated
    )


@router.post("/batch-submit", response_model=BatchSubmitResponse)
async def submit_batch(workspace: Workspace) -> BatchSubmitResponse:
    """Submit every selected transaction for settlement in one batch.

    Only verified transactions may be selected.
    """
    result = await workspace.submit_batch()
    return BatchSubmitResponse(
        submitted_count=result.submitted_count,
        message=f"Successfully submitted {result.submitted_count} transaction(s) for settlement.",
    )


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(workspace: Workspace) -> DashboardSummary:
    """Status counts and the first pending transactions awaiting review."""
    if not workspace.store.loaded:
        await workspace.load()
    return workspace.dashboard()


@router.delete("/workspace", status_code=204)
async def close_workspace(request: Request, user: RequireEmployee) -> None:
    """Leave the transactions view. Responses still outstanding are discarded."""
    get_workspace_registry(request).discard(user.user_id)
