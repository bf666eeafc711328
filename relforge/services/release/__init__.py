"""Release services: mutators, branch forger, tag processor, orchestrator."""

from relforge.services.release.branch import (
    DIVERGE_MESSAGE,
    fork_release_branch,
    is_valid_branch_name,
    render_branch_name,
)
from relforge.services.release.model import SemverEntry, TagFileBump, TagReport, VersionCodeBump
from relforge.services.release.orchestrator import (
    ReleaseFailure,
    ReleaseOrchestrator,
    ReleaseRun,
    Stage,
    prepare_repository,
    run_release,
)
from relforge.services.release.preview import ReleasePreview, preview_release
from relforge.services.release.tag_file import bump_tag_file, parse_semver, plan_tag_file_bump
from relforge.services.release.tags import pending_tags, process_tags, read_pending_tags
from relforge.services.release.version_code import bump_version_code, plan_version_code_bump

__all__ = [
    "DIVERGE_MESSAGE",
    "ReleaseFailure",
    "ReleaseOrchestrator",
    "ReleasePreview",
    "ReleaseRun",
    "SemverEntry",
    "Stage",
    "TagFileBump",
    "TagReport",
    "VersionCodeBump",
    "bump_tag_file",
    "bump_version_code",
    "fork_release_branch",
    "is_valid_branch_name",
    "parse_semver",
    "pending_tags",
    "plan_tag_file_bump",
    "plan_version_code_bump",
    "prepare_repository",
    "preview_release",
    "process_tags",
    "read_pending_tags",
    "render_branch_name",
    "run_release",
]
