"""The release run as a linear state machine.

VALIDATING -> BUILDING -> VERIFYING -> NOTARIZING -> STAPLING -> ARCHIVING
-> SIGNING -> REPORTING -> DONE, with FAILED reachable from every step.
The first failing stage ends the run; nothing is retried or rolled back.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from pathlib import Path

from ship.core.config import ReleaseConfig
from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol
from ship.release import stages
from ship.release.errors import ReleaseError
from ship.release.model import (
    STAGE_ORDER,
    Artifacts,
    ReleaseReport,
    ReleaseRequest,
    ReleaseState,
    next_state,
)
from ship.release.stages import StageEnv, StageHandler
from ship.release.toolchain import Toolchain

__all__ = ["HANDLERS", "ReleaseOrchestrator"]

HANDLERS: Mapping[ReleaseState, StageHandler] = {
    ReleaseState.BUILDING: stages.build,
    ReleaseState.VERIFYING: stages.verify,
    ReleaseState.NOTARIZING: stages.notarize,
    ReleaseState.STAPLING: stages.staple,
    ReleaseState.ARCHIVING: stages.archive,
    ReleaseState.SIGNING: stages.sign,
    ReleaseState.REPORTING: stages.report,
}


def _local_now() -> datetime:
    return datetime.now().astimezone()


class ReleaseOrchestrator:
    """Drives one release run.

    `history` records every state entered, in order, ending with DONE or
    FAILED.
    """

    def __init__(
        self,
        config: ReleaseConfig,
        console: ConsoleProtocol,
        *,
        tools: Toolchain | None = None,
        now: Callable[[], datetime] = _local_now,
    ) -> None:
        self._env = StageEnv(
            config=config,
            tools=tools or Toolchain(config),
            console=console,
            now=now,
        )
        self.history: list[ReleaseState] = []

    @property
    def state(self) -> ReleaseState | None:
        return self.history[-1] if self.history else None

    def _enter(self, state: ReleaseState) -> None:
        self.history.append(state)
        if state in STAGE_ORDER:
            step = STAGE_ORDER.index(state) + 1
            self._env.console.header(f"[{step}/{len(STAGE_ORDER)}] {state.capitalize()}")

    def _fail(self, error: ReleaseError) -> Err[ReleaseError]:
        self.history.append(ReleaseState.FAILED)
        return Err(error)

    def run(
        self, signing_identity: str, output_directory: Path
    ) -> Result[ReleaseReport, ReleaseError]:
        if self.history:
            raise RuntimeError("a ReleaseOrchestrator runs at most once")

        request = ReleaseRequest(
            signing_identity=signing_identity.strip(),
            output_directory=output_directory,
        )

        self._enter(ReleaseState.VALIDATING)
        validated = stages.validate(self._env, request)
        if isinstance(validated, Err):
            return self._fail(validated.error)

        plan = validated.value
        self._env.console.info(
            f"{self._env.config.app.name} {plan.version.display} -> {plan.paths.final_archive_path}"
        )

        artifacts = Artifacts()
        state = next_state(ReleaseState.VALIDATING)
        while not state.is_terminal:
            self._enter(state)
            outcome = HANDLERS[state](self._env, plan, artifacts)
            if isinstance(outcome, Err):
                return self._fail(outcome.error)
            artifacts = outcome.value
            state = next_state(state)

        if artifacts.report is None:
            return self._fail(
                ReleaseError(
                    stage=ReleaseState.REPORTING,
                    kind="artifact_missing",
                    message="release metadata was not produced",
                )
            )
        self._enter(ReleaseState.DONE)
        return Ok(artifacts.report)
