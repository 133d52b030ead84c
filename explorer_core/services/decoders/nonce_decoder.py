"""
Nonce Manager Detector - 2D nonce increments and access key counts.
"""

from .base import (
    AccountPart,
    ActionPart,
    DetectionContext,
    DetectionResult,
    KnownEvent,
    RawEventLog,
    TextPart,
)


def detect_nonce(log: RawEventLog, ctx: DetectionContext) -> DetectionResult:
    if log.event_name == 'NonceIncremented':
        return KnownEvent(
            type='nonce incremented',
            parts=(
                ActionPart('Increment Nonce'),
                AccountPart(log.arg('account')),
            ),
            note=(
                ('Key', TextPart(str(log.arg('nonceKey')))),
                ('New Nonce', TextPart(str(log.arg('newNonce')))),
            ),
        )

    if log.event_name == 'ActiveKeyCountChanged':
        return KnownEvent(
            type='active key count changed',
            parts=(
                ActionPart('Key Count Changed'),
                AccountPart(log.arg('account')),
            ),
            note=(('New Count', TextPart(str(log.arg('newCount')))),),
        )

    return None
