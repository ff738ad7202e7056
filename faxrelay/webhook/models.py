"""Fax receive directives returned to the webhook sender."""

from __future__ import annotations

from xml.sax.saxutils import quoteattr

RECEIVE_PATH = "/fax/receive"
RECEIVED_PATH = "/fax/received"

REJECT_DIRECTIVE = "<Response><Reject/></Response>"


def accept_directive(fax_number: str, action_path: str = RECEIVED_PATH) -> str:
    """Tell the sender to receive the fax and report completion for *fax_number*."""
    action = quoteattr(f"{action_path}?to={fax_number}")
    return f"<Response><Receive action={action}/></Response>"


def reject_directive() -> str:
    return REJECT_DIRECTIVE
