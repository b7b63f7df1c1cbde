"""
Conversation flows: one declarative step table per feature.

Usage:
    from walletbot.services.conversation.flows import build_flows, enter_flow
"""

from typing import Dict, Optional, Sequence

from walletbot.models.finance import Card
from walletbot.models.session import ConversationState
from .base_flow import BaseFlow, CardScopedFlow, FlowOutcome, Step, CARD_STEP
from .auth_flows import LoginFlow, SignupFlow
from .card_flow import AddCardFlow
from .transaction_flow import AddTransactionFlow
from .goal_flows import AddLimitFlow, AddPlanFlow, AddWishFlow
from .stats_flow import StatsFlow

__all__ = [
    "BaseFlow",
    "CardScopedFlow",
    "FlowOutcome",
    "Step",
    "CARD_STEP",
    "LoginFlow",
    "SignupFlow",
    "AddCardFlow",
    "AddTransactionFlow",
    "AddLimitFlow",
    "AddPlanFlow",
    "AddWishFlow",
    "StatsFlow",
    "FLOW_MAPPING",
    "build_flows",
    "enter_flow",
]

FLOW_MAPPING = {
    flow.name: flow
    for flow in (
        LoginFlow,
        SignupFlow,
        AddCardFlow,
        AddTransactionFlow,
        AddLimitFlow,
        AddPlanFlow,
        AddWishFlow,
        StatsFlow,
    )
}


def build_flows(api, sessions) -> Dict[str, BaseFlow]:
    """One instance of every flow, keyed by flow name."""
    return {name: flow_class(api, sessions) for name, flow_class in FLOW_MAPPING.items()}


def enter_flow(cards: Optional[Sequence[Card]], flow_name: str, context: Optional[Dict] = None) -> ConversationState:
    """
    Initial state of a flow.

    Card scoped flows skip the card selection when there is exactly one card
    and raise NotFoundError when there is none.
    """
    flow_class = FLOW_MAPPING.get(flow_name)
    if flow_class is None:
        raise ValueError(f"Unknown flow: {flow_name}")
    return flow_class.initial_state(context, cards)
