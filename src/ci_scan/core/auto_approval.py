"""Policy-driven auto-approval of changed files.

Auto-approval is advisory metadata about a file's nature. It does not look
at issue counts; combining it with the verdict is up to the caller.
"""

import logging
import posixpath
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence

from .config import AutoApprovalPolicy

logger = logging.getLogger(__name__)


class ApprovalReason(str, Enum):
    """Why a file qualified for auto-approval."""
    FILETYPE = "filetype"


def file_extension(file_path: str) -> Optional[str]:
    """Text after the last dot of the basename, or None when there is no dot."""
    basename = posixpath.basename(file_path.replace("\\", "/"))
    if "." not in basename:
        return None
    return basename.rsplit(".", 1)[1]


class ApprovalRule:
    """A single auto-approval criterion."""

    reason: ApprovalReason

    def matches(self, file_path: str, policy: AutoApprovalPolicy) -> bool:
        raise NotImplementedError


class FileTypeRule(ApprovalRule):
    """Approve files whose extension is on the policy allow-list."""

    reason = ApprovalReason.FILETYPE

    def matches(self, file_path: str, policy: AutoApprovalPolicy) -> bool:
        extension = file_extension(file_path)
        return extension is not None and extension in policy.allowed_extensions


DEFAULT_RULES: Sequence[ApprovalRule] = (FileTypeRule(),)


def auto_approve_files(
    changed_files: Iterable[str],
    policy: AutoApprovalPolicy,
    rules: Optional[Sequence[ApprovalRule]] = None,
) -> Dict[str, ApprovalReason]:
    """Map each auto-approvable file to the reason it qualified.

    Args:
        changed_files: Every file path changed by the commit
        policy: Auto-approval policy for this run
        rules: Rules to try in order; the first match wins

    Returns:
        Dict of file path -> ApprovalReason, only for qualifying files
    """
    if not policy.enabled:
        return {}

    if not policy.allowed_extensions:
        logger.warning("Auto-approval is enabled but no file types are allowed; nothing qualifies")
        return {}

    rules = DEFAULT_RULES if rules is None else rules
    approved: Dict[str, ApprovalReason] = {}

    for file_path in changed_files:
        for rule in rules:
            if rule.matches(file_path, policy):
                approved[file_path] = rule.reason
                logger.debug(f"Auto-approvable: {file_path} ({type(rule).__name__})")
                break

    logger.info(f"{len(approved)} file(s) qualify for auto-approval")
    return approved
