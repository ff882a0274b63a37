from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from fortivus.core.errors import FortivusError
from fortivus.services.user_management import UserManager

logger = logging.getLogger(__name__)


@dataclass
class BulkActionResult:
    action: str
    succeeded: int = 0
    failed: list[int] = field(default_factory=list)


async def apply_bulk_action(
    action: str,
    target_ids: Iterable[int],
    acting_user_id: int,
    manager: UserManager,
) -> BulkActionResult:
    """
    Run `action` against every target at once and tally the outcomes.

    The acting admin is never a target. A failing target is recorded in
    `failed` and does not affect the others.
    """
    targets = [t for t in dict.fromkeys(target_ids) if t != acting_user_id]
    result = BulkActionResult(action=action)
    if not targets:
        return result

    outcomes = await asyncio.gather(
        *(manager.apply(t, action) for t in targets),
        return_exceptions=True,
    )

    for target, outcome in zip(targets, outcomes):
        if isinstance(outcome, BaseException):
            reason = outcome.detail if isinstance(outcome, FortivusError) else repr(outcome)
            logger.warning("Bulk %s failed for user %s: %s", action, target, reason)
            result.failed.append(target)
        else:
            result.succeeded += 1

    logger.info("Bulk %s: %s succeeded, %s failed", action, result.succeeded, len(result.failed))
    return result
