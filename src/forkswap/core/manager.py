"""Fork swap state machine.

State is (active fork name, archived forks, live working copy, live params).
Switch and clone are ordered lists of Steps executed best-effort: a failing
step is reported and recorded in the journal, and the sequence continues.
Both end by rebooting the device.
"""

import logging
import shutil
from pathlib import Path

from forkswap.core.archive import ForkStatus
from forkswap.core.context import ForkSwapContext
from forkswap.core.errors import (
    CloneFailedError,
    ForkSwapError,
    MissingActiveForkError,
    UnknownForkError,
    ValidationError,
)
from forkswap.core.file_utils import (
    merge_directory,
    move_directory,
    remove_directory,
    replace_directory,
)
from forkswap.core.retry import retry_with_delay
from forkswap.core.steps import Step, StepResult, failed_steps, run_steps
from forkswap.core.validation import validate_fork_name, validate_repo_url

logger = logging.getLogger(__name__)


class ForkSwapManager:
    """Switch, clone, delete and update forks on the device."""

    def __init__(self, ctx: ForkSwapContext) -> None:
        self._ctx = ctx
        self._config = ctx.config
        self._archive = ctx.archive
        self._store = ctx.active_fork_store
        self._journal = ctx.journal

    # Queries

    def active_fork(self) -> str | None:
        return self._store.get()

    def require_active_fork(self) -> str:
        """Return the active fork name.

        Raises:
            MissingActiveForkError: If the pointer file is empty or missing
        """
        name = self._store.get()
        if name is None:
            raise MissingActiveForkError(
                f"No active fork recorded in {self._store.path}; cannot continue."
            )
        return name

    def resolve_fork_dir(self, name: str) -> Path:
        """Working copy of a fork: the live path for the active fork, else its archive."""
        if name == self._store.get():
            return self._config.openpilot_dir
        return self._archive.working_copy(name)

    def check_fork_update(self, name: str) -> bool:
        """Whether the fork's upstream tracking branch has commits HEAD lacks.

        Fetches without merging. A missing working copy, a failed fetch, an
        unresolvable HEAD or a branch without upstream all count as "no update".
        """
        repo_dir = self.resolve_fork_dir(name)
        if not repo_dir.is_dir():
            return False

        try:
            self._ctx.git.fetch(repo_dir)
        except RuntimeError as e:
            logger.warning("Could not fetch updates for %s: %s", name, e)
            return False

        local_commit = self._ctx.git.get_head_commit(repo_dir)
        remote_commit = self._ctx.git.get_upstream_commit(repo_dir)
        if local_commit is None or remote_commit is None:
            return False
        return local_commit != remote_commit

    def fork_statuses(self, *, check_updates: bool = True) -> list[ForkStatus]:
        return [
            ForkStatus(
                name=name,
                has_working_copy=self._archive.has_working_copy(name),
                has_config_snapshot=self._archive.has_config_snapshot(name),
                update_available=check_updates and self.check_fork_update(name),
            )
            for name in self._archive.list_forks()
        ]

    # Operations

    def update_fork(self, name: str) -> None:
        """Pull upstream commits into the fork's working copy.

        Raises:
            UnknownForkError: If the fork has no working copy
            RuntimeError: If git pull fails
        """
        validate_fork_name(name)
        repo_dir = self.resolve_fork_dir(name)
        if not repo_dir.is_dir():
            raise UnknownForkError(f"The fork {name} does not exist.")

        self._ctx.git.pull(repo_dir)
        self._ctx.feedback.success(f"Fork {name} has been updated.")

    def delete(self, name: str) -> bool:
        """Remove a fork's archive directory.

        The active fork pointer is never changed. Deleting the active fork's
        entry only removes its params snapshot; the live copy is untouched.

        Returns:
            True if the archive was removed
        """
        validate_fork_name(name)
        fork_dir = self._archive.fork_dir(name)
        if not fork_dir.is_dir():
            self._ctx.feedback.info(f"The fork {name} does not exist.")
            return False

        if name == self._store.get():
            self._ctx.feedback.warning(
                f"{name} is the active fork; only its archived snapshot is removed, "
                f"the live copy at {self._config.openpilot_dir} is kept."
            )

        try:
            remove_directory(fork_dir)
        except OSError as e:
            self._ctx.feedback.error(f"Error while deleting the fork: {name}. {e}")
            return False

        self._ctx.feedback.success(f"Successfully deleted the fork: {name}.")
        return True

    def switch(self, target: str) -> list[StepResult]:
        """Archive the live fork and make `target` live, then reboot.

        Raises:
            ValidationError: If target is not a valid name
            UnknownForkError: If target has no archived working copy
            MissingActiveForkError: If no fork is currently active
        """
        validate_fork_name(target)
        if not self._archive.has_working_copy(target):
            raise UnknownForkError(f"The fork {target} has no archived working copy.")
        current = self.require_active_fork()

        live = self._config.openpilot_dir
        archived_target = self._archive.working_copy(target)
        target_params = self._archive.config_snapshot(target)

        steps = [
            *self._archive_live_steps(current),
            Step(
                description=f"move {target} into {live}",
                action=lambda: move_directory(archived_target, live),
                success_message=f"Selected fork {target} moved to {live}.",
                failure_message=f"Error while moving {target}'s openpilot directory to {live}.",
            ),
            self._set_active_step(target),
            Step(
                description=f"restore params for {target}",
                action=lambda: replace_directory(target_params, self._config.params_path),
                success_message=f"Params for {target} restored.",
                failure_message=f"Error while restoring params for {target}.",
                when=target_params.is_dir,
            ),
            *self._finalize_live_steps(target),
        ]

        self._ctx.feedback.info(f"Switching from {current} to {target}...")
        self._journal.begin("switch", previous_fork=current, target_fork=target)
        results = self._execute(steps)
        self._reboot(f"Switched to {target}. Rebooting...")
        return results

    def clone(self, new_name: str, repo_url: str, branch: str | None = None) -> list[StepResult]:
        """Clone a new fork, make it live, then reboot.

        Raises:
            ValidationError: If the name or URL is malformed, or names the active fork
            MissingActiveForkError: If no fork is currently active
            CloneFailedError: If cloning fails after all retries; nothing has
                been switched, callers should run cleanup()
        """
        validate_fork_name(new_name)
        validate_repo_url(repo_url, self._config.git_host)
        current = self.require_active_fork()
        if new_name == current:
            raise ValidationError(
                f"{new_name} is the active fork; switch to another fork before re-cloning it."
            )

        destination = self._archive.working_copy(new_name)
        if destination.exists():
            run_steps(
                [
                    Step(
                        description=f"remove stale working copy of {new_name}",
                        action=lambda: remove_directory(destination),
                        success_message=f"Existing openpilot directory for {new_name} deleted.",
                        failure_message=(
                            f"Error while deleting existing openpilot directory for {new_name}."
                        ),
                    )
                ],
                feedback=self._ctx.feedback,
            )

        self._journal.begin("clone", previous_fork=current, target_fork=new_name)
        self._clone_with_retry(new_name, repo_url, destination, branch)

        live = self._config.openpilot_dir
        steps = [
            Step(
                description=f"change owner of {destination}",
                action=lambda: self._ctx.system.change_owner(destination, self._config.owner),
                success_message="Permissions for cloned fork adjusted.",
                failure_message="Error while adjusting permissions for cloned fork.",
            ),
            *self._archive_live_steps(current),
            Step(
                description=f"move {new_name} into {live}",
                action=lambda: move_directory(destination, live),
                success_message=f"Newly cloned fork moved to {live}.",
                failure_message=f"Error while moving newly cloned fork to {live}.",
            ),
            self._set_active_step(new_name),
            *self._finalize_live_steps(new_name),
        ]

        results = self._execute(steps)
        self._reboot(f"Switched to new fork named {new_name}. Rebooting...")
        return results

    def cleanup(self, previous_fork: str | None = None) -> list[StepResult]:
        """Best-effort rollback after an interrupted or failed operation.

        If the live copy is missing, the previous fork's archived working copy
        is moved back, the pointer repointed to it, and its params snapshot
        restored. When the journal records an unfinished clone, the clone's
        working copy is removed so it is never offered as a fork. The journal
        is cleared afterwards.

        Args:
            previous_fork: Fork that was active before the operation; defaults
                to the journal's record, then to the current pointer
        """
        self._ctx.feedback.info("Cleaning up...")

        entry = self._journal.load()
        previous = previous_fork or (entry.previous_fork if entry else None) or self._store.get()

        live = self._config.openpilot_dir
        steps: list[Step] = []
        if previous is not None and not live.exists():
            archived = self._archive.working_copy(previous)
            snapshot = self._archive.config_snapshot(previous)

            def restore_previous() -> None:
                move_directory(archived, live)
                if not self._store.set(previous):
                    raise ForkSwapError(f"Could not record {previous} as the active fork.")

            steps.append(
                Step(
                    description=f"restore {previous} to {live}",
                    action=restore_previous,
                    success_message=f"Successfully restored {previous} to {live}.",
                    failure_message=f"Error while restoring {previous} to {live}.",
                    when=archived.is_dir,
                )
            )
            steps.append(
                Step(
                    description=f"restore params for {previous}",
                    action=lambda: replace_directory(snapshot, self._config.params_path),
                    success_message=f"Successfully restored params for {previous}.",
                    failure_message=f"Error while restoring params for {previous}.",
                    when=snapshot.is_dir,
                )
            )

        if entry is not None and entry.operation == "clone":
            cloned = entry.target_fork
            partial = self._archive.working_copy(cloned)

            def remove_partial_clone() -> None:
                remove_directory(partial)
                self._archive.prune(cloned)

            steps.append(
                Step(
                    description=f"remove unfinished clone of {cloned}",
                    action=remove_partial_clone,
                    success_message=f"Unfinished clone of {cloned} removed.",
                    failure_message=f"Error while removing the unfinished clone of {cloned}.",
                    when=partial.exists,
                )
            )

        results = run_steps(steps, feedback=self._ctx.feedback)
        self._journal.clear()
        self._ctx.feedback.info("Cleanup completed.")
        return results

    def ensure_manager_script(self, active: str) -> None:
        """Copy the manager script from the source fork into the live copy.

        Nothing to do when the source fork is the one being made live.

        Raises:
            FileNotFoundError: If the source fork has no manager script
        """
        if active == self._config.script_source_fork:
            return
        source = self._archive.working_copy(self._config.script_source_fork) / (
            self._config.script_relpath
        )
        if not source.is_file():
            raise FileNotFoundError(f"Manager script source not found: {source}")

        target = self._config.manager_script
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)

    # Internals

    def _archive_live_steps(self, current: str) -> list[Step]:
        """Back up params and move the live copy into `current`'s archive."""
        live = self._config.openpilot_dir
        params = self._config.params_path
        archived = self._archive.working_copy(current)
        snapshot = self._archive.config_snapshot(current)

        return [
            Step(
                description=f"back up params for {current}",
                action=lambda: merge_directory(params, snapshot),
                success_message=f"Params for {current} backed up.",
                failure_message=f"Error while backing up params for {current}.",
                when=params.is_dir,
            ),
            Step(
                description=f"remove stale archived copy of {current}",
                action=lambda: remove_directory(archived),
                success_message=f"Openpilot directory for {current} deleted.",
                failure_message=f"Error while deleting openpilot directory for {current}.",
                when=archived.exists,
            ),
            Step(
                description=f"archive {live} as {current}",
                action=lambda: move_directory(live, archived),
                success_message=f"Openpilot directory moved to {current}'s directory.",
                failure_message=f"Error while moving openpilot directory to {current}'s directory.",
            ),
        ]

    def _set_active_step(self, name: str) -> Step:
        def set_active() -> None:
            if not self._store.set(name):
                raise ForkSwapError(f"Pointer file {self._store.path} does not read back {name}.")

        return Step(
            description=f"set active fork to {name}",
            action=set_active,
            success_message=f"Current fork updated to {name}.",
            failure_message=f"Error while updating current fork to {name}.",
        )

    def _finalize_live_steps(self, active: str) -> list[Step]:
        """Ownership and manager script for the newly live copy."""
        live = self._config.openpilot_dir
        script = self._config.manager_script
        return [
            Step(
                description=f"change owner of {live}",
                action=lambda: self._ctx.system.change_owner(live, self._config.owner),
                success_message="Permissions for openpilot directory adjusted.",
                failure_message="Error while adjusting permissions for openpilot directory.",
            ),
            Step(
                description="ensure manager script",
                action=lambda: self.ensure_manager_script(active),
                success_message=f"{script.name} copied/updated in the current fork.",
                failure_message=f"Error while copying/updating {script.name} in the current fork.",
            ),
            Step(
                description=f"make {script} executable",
                action=lambda: self._ctx.system.make_executable(script),
                success_message=f"Permissions for {script.name} adjusted.",
                failure_message=f"Error while adjusting permissions for {script.name}.",
            ),
        ]

    def _clone_with_retry(
        self, name: str, repo_url: str, destination: Path, branch: str | None
    ) -> None:
        @retry_with_delay(
            max_attempts=self._config.max_retries,
            delay=self._config.retry_delay,
            ctx=self._ctx,
        )
        def attempt() -> None:
            if destination.exists():
                remove_directory(destination)
            self._ctx.git.clone(repo_url, destination, branch=branch or None)

        try:
            attempt()
        except RuntimeError as e:
            if destination.exists():
                remove_directory(destination)
            self._archive.prune(name)
            raise CloneFailedError(
                f"Could not clone {repo_url} after {self._config.max_retries} attempts."
            ) from e

    def _execute(self, steps: list[Step]) -> list[StepResult]:
        results = run_steps(steps, feedback=self._ctx.feedback, journal=self._journal)
        failures = failed_steps(results)
        if failures:
            self._ctx.feedback.warning(
                f"{len(failures)} step(s) failed; see {self._config.log_file} for details."
            )
        self._journal.clear()
        return results

    def _reboot(self, message: str) -> None:
        self._ctx.feedback.info(message)
        try:
            self._ctx.system.reboot()
        except RuntimeError as e:
            self._ctx.feedback.error(f"Reboot failed; reboot the device manually. {e}")
