"""
TIP-403 Policy Registry Detector

Whitelist/blacklist membership, policy admin changes and policy creation.
"""

from typing import Callable, Dict

from .base import (
    AccountPart,
    ActionPart,
    DetectionContext,
    DetectionResult,
    KnownEvent,
    RawEventLog,
    TextPart,
)


def _membership(label: str, event_type: str):
    def handler(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
        return KnownEvent(
            type=event_type,
            parts=(
                ActionPart(label),
                AccountPart(log.arg('account')),
                TextPart('on Policy'),
                TextPart(f"#{log.arg('policyId')}"),
            ),
        )
    return handler


def _policy_admin_updated(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='policy admin updated',
        parts=(
            ActionPart('New Admin'),
            AccountPart(log.arg('admin')),
            TextPart('on Policy'),
            TextPart(f"#{log.arg('policyId')}"),
        ),
        note=(('Updater', AccountPart(log.arg('updater'))),),
    )


def _policy_created(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    return KnownEvent(
        type='policy created',
        parts=(
            ActionPart('Create Policy'),
            TextPart(f"#{log.arg('policyId')}"),
        ),
    )


_POLICY_HANDLERS: Dict[str, Callable[[RawEventLog, DetectionContext], DetectionResult]] = {
    'WhitelistUpdated': _membership('Whitelist', 'whitelist'),
    'BlacklistUpdated': _membership('Blacklist', 'blacklist'),
    'PolicyAdminUpdated': _policy_admin_updated,
    'PolicyCreated': _policy_created,
}


def detect_tip403_registry(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    handler = _POLICY_HANDLERS.get(log.event_name)
    return handler(log, ctx) if handler else None
