"""Release orchestration.

One run walks a one-way state machine:

    cloned -> checked_out -> version_mutated -> tag_file_mutated -> committed
           -> trunk_pushed -> branch_forked -> branch_pushed -> tags_processed

Each transition is attempted once. The first error ends the run in ``failed``;
nothing that already happened (a pushed trunk, a pushed branch) is rolled back.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum

from relforge.core.config import ReleaseConfig
from relforge.core.result import Err, Ok, Result
from relforge.git.auth import git_environment
from relforge.git.repository import PushOutcome, Repository
from relforge.output.console import ConsoleProtocol, Style
from relforge.platform.process import redact_url
from relforge.release.errors import ReleaseError
from relforge.release.fsm import FINISH, StepOutcome, advance, run_state_machine
from relforge.services.release.branch import fork_release_branch, render_branch_name
from relforge.services.release.model import TagFileBump, TagReport, VersionCodeBump
from relforge.services.release.tag_file import bump_tag_file
from relforge.services.release.tags import process_tags
from relforge.services.release.version_code import bump_version_code
from relforge.template.engine import ActionTemplateRenderer, TemplateRenderer


class Stage(StrEnum):
    CLONED = "cloned"
    CHECKED_OUT = "checked_out"
    VERSION_MUTATED = "version_mutated"
    TAG_FILE_MUTATED = "tag_file_mutated"
    COMMITTED = "committed"
    TRUNK_PUSHED = "trunk_pushed"
    BRANCH_FORKED = "branch_forked"
    BRANCH_PUSHED = "branch_pushed"
    TAGS_PROCESSED = "tags_processed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ReleaseRun:
    """Snapshot of one orchestration pass."""

    stage: Stage
    version: VersionCodeBump | None = None
    semver: TagFileBump | None = None
    commit: str | None = None
    branch: str | None = None
    tags: TagReport | None = None


@dataclass(frozen=True, slots=True)
class ReleaseFailure:
    """Why a run ended in ``failed``.

    Attributes:
        reached: Last stage completed before the failure (None if cloning failed)
        error: The originating error
        run: The run snapshot, with stage set to FAILED
    """

    reached: Stage | None
    error: ReleaseError
    run: ReleaseRun


def prepare_repository(
    config: ReleaseConfig,
    *,
    env: Mapping[str, str],
    console: ConsoleProtocol,
) -> Result[Repository, ReleaseError]:
    """Clone the trunk into the source directory, or reuse an existing clone."""
    repo = Repository(config.source_dir, env=env)
    if repo.exists():
        console.info(f"using existing clone at {config.source_dir}")
        return Ok(repo)

    if config.source_dir.is_dir() and any(config.source_dir.iterdir()):
        return Err(
            ReleaseError(
                kind="vcs",
                message=f"source directory is not empty and not a git repository: {config.source_dir}",
            )
        )

    shown_url = redact_url(config.clone_url)
    console.command(f"git clone --branch {config.trunk_branch} {shown_url} {config.source_dir}")
    cloned = Repository.clone(
        config.clone_url,
        config.source_dir,
        branch=config.trunk_branch,
        remote=config.remote,
        env=env,
    )
    if isinstance(cloned, Err):
        return Err(ReleaseError(kind="vcs", message="unable to clone repository", hint=cloned.error.message))
    return Ok(cloned.value)


class ReleaseOrchestrator:
    """Sequences the release steps on a cloned repository."""

    def __init__(
        self,
        *,
        config: ReleaseConfig,
        repo: Repository,
        console: ConsoleProtocol,
        now: datetime,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self._config = config
        self._repo = repo
        self._console = console
        self._now = now
        self._renderer = renderer or ActionTemplateRenderer()

    def run(self) -> Result[ReleaseRun, ReleaseFailure]:
        handlers = {
            Stage.CLONED.value: self._checkout_trunk,
            Stage.CHECKED_OUT.value: self._mutate_version,
            Stage.VERSION_MUTATED.value: self._mutate_tag_file,
            Stage.TAG_FILE_MUTATED.value: self._commit,
            Stage.COMMITTED.value: self._push_trunk,
            Stage.TRUNK_PUSHED.value: self._fork_branch,
            Stage.BRANCH_FORKED.value: self._push_branch,
            Stage.BRANCH_PUSHED.value: self._process_tags,
            Stage.TAGS_PROCESSED.value: lambda _run: Ok(FINISH),
        }
        result = run_state_machine(
            initial_state=ReleaseRun(stage=Stage.CLONED),
            get_step=lambda run: run.stage.value,
            handlers=handlers,
            on_transition=self._report,
        )
        if isinstance(result, Err):
            failure = result.error
            return Err(
                ReleaseFailure(
                    reached=failure.state.stage,
                    error=failure.error,
                    run=replace(failure.state, stage=Stage.FAILED),
                )
            )
        return Ok(result.value)

    def _report(self, previous: ReleaseRun, current: ReleaseRun) -> None:
        self._console.success(f"{previous.stage} -> {current.stage}")

    def _checkout_trunk(self, run: ReleaseRun) -> Result[StepOutcome[ReleaseRun], ReleaseError]:
        branch = self._config.trunk_branch
        self._console.command(f"git checkout {branch}")
        result = self._repo.checkout(branch).map_err(
            lambda e: ReleaseError(kind="vcs", message=f"unable to checkout {branch}", hint=e.message)
        )
        if isinstance(result, Err):
            return result
        return Ok(advance(replace(run, stage=Stage.CHECKED_OUT)))

    def _mutate_version(self, run: ReleaseRun) -> Result[StepOutcome[ReleaseRun], ReleaseError]:
        result = bump_version_code(
            self._config.version_code_path,
            pattern=self._config.version_code_regex,
            template=self._config.version_code_template,
            renderer=self._renderer,
        )
        if isinstance(result, Err):
            return result
        bump = result.value
        if bump.extra_matches:
            lines = ", ".join(str(i + 1) for i in bump.extra_matches)
            self._console.warning(f"version code regex also matches line(s) {lines}; left unchanged")
        self._console.print(f"version code {bump.old} -> {bump.new}")
        return Ok(advance(replace(run, stage=Stage.VERSION_MUTATED, version=bump)))

    def _mutate_tag_file(self, run: ReleaseRun) -> Result[StepOutcome[ReleaseRun], ReleaseError]:
        result = bump_tag_file(
            self._config.tag_file_path,
            template=self._config.tag_file_template,
            renderer=self._renderer,
        )
        if isinstance(result, Err):
            return result
        bump = result.value
        self._console.print(f"tag file {bump.old_line.strip()} -> {bump.new_line.strip()}")
        return Ok(advance(replace(run, stage=Stage.TAG_FILE_MUTATED, semver=bump)))

    def _commit(self, run: ReleaseRun) -> Result[StepOutcome[ReleaseRun], ReleaseError]:
        message = self._config.version_commit_message
        self._console.command("git add -A")
        staged = self._repo.add_all()
        if isinstance(staged, Err):
            return Err(ReleaseError(kind="vcs", message="unable to stage changes", hint=staged.error.message))

        self._console.command(f"git commit -m {message!r}")
        committed = self._repo.commit(message, identity=self._config.identity, when=self._now)
        if isinstance(committed, Err):
            return Err(ReleaseError(kind="vcs", message="unable to commit version update", hint=committed.error.message))
        return Ok(advance(replace(run, stage=Stage.COMMITTED, commit=committed.value)))

    def _push(self, branch: str) -> Result[None, ReleaseError]:
        remote = self._config.remote
        self._console.command(f"git push {remote} refs/heads/{branch}")
        result = self._repo.push_branch(branch, remote=remote)
        match result:
            case Ok(PushOutcome.UP_TO_DATE):
                self._console.print(f"{branch} already up to date", Style.DIM)
                return Ok(None)
            case Ok(_):
                return Ok(None)
            case Err(e):
                return Err(ReleaseError(kind="vcs", message=f"unable to push branch {branch}", hint=e.message))

    def _push_trunk(self, run: ReleaseRun) -> Result[StepOutcome[ReleaseRun], ReleaseError]:
        pushed = self._push(self._config.trunk_branch)
        if isinstance(pushed, Err):
            return pushed
        return Ok(advance(replace(run, stage=Stage.TRUNK_PUSHED)))

    def _fork_branch(self, run: ReleaseRun) -> Result[StepOutcome[ReleaseRun], ReleaseError]:
        name = render_branch_name(
            self._config.release_branch_template,
            now=self._now,
            renderer=self._renderer,
        )
        if isinstance(name, Err):
            return name
        self._console.info(f"creating release branch {name.value}")
        forked = fork_release_branch(
            self._repo,
            name.value,
            identity=self._config.identity,
            now=self._now,
            console=self._console,
        )
        if isinstance(forked, Err):
            return forked
        return Ok(advance(replace(run, stage=Stage.BRANCH_FORKED, branch=forked.value)))

    def _push_branch(self, run: ReleaseRun) -> Result[StepOutcome[ReleaseRun], ReleaseError]:
        if run.branch is None:
            return Err(ReleaseError(kind="vcs", message="no release branch to push"))
        pushed = self._push(run.branch)
        if isinstance(pushed, Err):
            return pushed
        return Ok(advance(replace(run, stage=Stage.BRANCH_PUSHED)))

    def _process_tags(self, run: ReleaseRun) -> Result[StepOutcome[ReleaseRun], ReleaseError]:
        result = process_tags(
            self._repo,
            tag_file=self._config.tag_file_path,
            suffix=self._config.tag_name_suffix,
            remote=self._config.remote,
            identity=self._config.identity,
            console=self._console,
        )
        if isinstance(result, Err):
            return result
        return Ok(advance(replace(run, stage=Stage.TAGS_PROCESSED, tags=result.value)))


def run_release(
    config: ReleaseConfig,
    *,
    console: ConsoleProtocol,
    environ: Mapping[str, str] | None = None,
    now: datetime | None = None,
    renderer: TemplateRenderer | None = None,
) -> Result[ReleaseRun, ReleaseFailure]:
    """Clone (or reuse) the repository and run every release step."""
    env = git_environment(config.credentials, os.environ if environ is None else environ)
    repo = prepare_repository(config, env=env, console=console)
    if isinstance(repo, Err):
        return Err(
            ReleaseFailure(
                reached=None,
                error=repo.error,
                run=ReleaseRun(stage=Stage.FAILED),
            )
        )

    orchestrator = ReleaseOrchestrator(
        config=config,
        repo=repo.value,
        console=console,
        now=now or datetime.now().astimezone(),
        renderer=renderer,
    )
    return orchestrator.run()
