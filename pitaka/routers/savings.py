"""
Savings router — goals funded from a linked account.

Endpoints:
  POST /savings                 — Create a goal (optional initial deposit)
  GET  /savings                 — List my goals
  GET  /savings/{id}            — Get one goal with its entry log
  POST /savings/{id}/deposit    — Linked account -> goal
  POST /savings/{id}/withdraw   — Goal -> linked account
  POST /savings/{id}/close      — Close an empty goal
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.savings import (
    SavingsAmountRequest,
    SavingsGoalCreateRequest,
    SavingsGoalResponse,
)
from pitaka.services import savings_service

router = APIRouter()


@router.post(
    "",
    response_model=Envelope[SavingsGoalResponse],
    status_code=201,
    summary="Create a savings goal",
)
async def create_goal(
    request: SavingsGoalCreateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    goal = await savings_service.create_goal(db, principal, **request.model_dump())
    return ok(goal, "Savings goal created")


@router.get("", response_model=Envelope[list[SavingsGoalResponse]], summary="List my goals")
async def list_goals(
    include_closed: bool = Query(False),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await savings_service.get_goals(db, principal, include_closed=include_closed))


@router.get("/{goal_id}", response_model=Envelope[SavingsGoalResponse], summary="Get a goal")
async def get_goal(
    goal_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await savings_service.get_goal(db, principal, goal_id))


@router.post(
    "/{goal_id}/deposit",
    response_model=Envelope[SavingsGoalResponse],
    summary="Deposit into a goal",
)
async def deposit(
    goal_id: uuid.UUID,
    request: SavingsAmountRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Move money from the goal's linked account into the goal."""
    goal = await savings_service.deposit(db, principal, goal_id, request.amount_cents)
    return ok(goal, "Deposit successful")


@router.post(
    "/{goal_id}/withdraw",
    response_model=Envelope[SavingsGoalResponse],
    summary="Withdraw from a goal",
)
async def withdraw(
    goal_id: uuid.UUID,
    request: SavingsAmountRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Move money from the goal back to its linked account. 422 if the goal holds less."""
    goal = await savings_service.withdraw(db, principal, goal_id, request.amount_cents)
    return ok(goal, "Withdrawal successful")


@router.post("/{goal_id}/close", response_model=Envelope[SavingsGoalResponse], summary="Close a goal")
async def close_goal(
    goal_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    goal = await savings_service.close_goal(db, principal, goal_id)
    return ok(goal, "Savings goal closed")
