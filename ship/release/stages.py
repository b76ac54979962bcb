"""One handler per release stage.

Handlers never raise for expected failures: each returns the updated
`Artifacts` or the `ReleaseError` that stops the run. The orchestrator
decides what runs next.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from ship.core.config import ReleaseConfig
from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, Style
from ship.platform.files import recreate_dir, sha256_file
from ship.release.errors import ReleaseError, tool_failed
from ship.release.metadata import format_release_date, render_enclosure, render_report
from ship.release.model import (
    ArchivePaths,
    Artifacts,
    ReleasePlan,
    ReleaseReport,
    ReleaseRequest,
    ReleaseState,
)
from ship.release.notarization import NotarizationVerdict, parse_verdict
from ship.release.signature import parse_signature
from ship.release.toolchain import Toolchain
from ship.release.versioning import read_versions

StageResult = Result[Artifacts, ReleaseError]


@dataclass(frozen=True, slots=True)
class StageEnv:
    config: ReleaseConfig
    tools: Toolchain
    console: ConsoleProtocol
    now: Callable[[], datetime]


StageHandler = Callable[[StageEnv, ReleasePlan, Artifacts], StageResult]


def _precondition(message: str, *, stage: ReleaseState = ReleaseState.VALIDATING) -> ReleaseError:
    return ReleaseError(stage=stage, kind="precondition", message=message)


def _require_app(
    plan: ReleasePlan, artifacts: Artifacts, stage: ReleaseState
) -> Result[Path, ReleaseError]:
    if artifacts.app_path is None or not artifacts.app_path.exists():
        return Err(
            ReleaseError(
                stage=stage,
                kind="artifact_missing",
                message=f"app bundle not found: {plan.exported_app_path}",
            )
        )
    return Ok(artifacts.app_path)


def validate(env: StageEnv, request: ReleaseRequest) -> Result[ReleasePlan, ReleaseError]:
    """Check every precondition before any side effect."""
    if not request.signing_identity.strip():
        return Err(
            ReleaseError(
                stage=ReleaseState.VALIDATING,
                kind="invalid_input",
                message="code signing identity must not be empty",
            )
        )

    output_directory = request.output_directory
    if not output_directory.is_dir():
        return Err(_precondition(f"output directory does not exist: {output_directory}"))
    if not os.access(output_directory, os.W_OK):
        return Err(_precondition(f"output directory is not writable: {output_directory}"))

    # the build stage wipes the build directory
    build_directory = env.config.build_directory.resolve()
    if env.config.root.resolve().is_relative_to(build_directory):
        return Err(
            ReleaseError(
                stage=ReleaseState.VALIDATING,
                kind="config_invalid",
                message=f"build directory {build_directory} contains the project root",
                hint="set [build] directory to a dedicated subdirectory",
            )
        )
    if output_directory.resolve().is_relative_to(build_directory):
        return Err(
            _precondition(
                f"output directory {output_directory} is inside the build directory "
                f"{build_directory}"
            )
        )

    version = read_versions(env.config.project_file)
    if isinstance(version, Err):
        return version

    paths = ArchivePaths.compute(
        app_name=env.config.app.name,
        version=version.value,
        output_directory=output_directory,
    )
    if paths.final_archive_path.exists():
        return Err(
            ReleaseError(
                stage=ReleaseState.VALIDATING,
                kind="precondition",
                message=f"archive already exists: {paths.final_archive_path}",
                hint="bump the version or move the previous release away",
            )
        )

    missing = env.tools.missing_tools()
    if missing:
        return Err(
            ReleaseError(
                stage=ReleaseState.VALIDATING,
                kind="missing_tool",
                message=f"required tools not found: {', '.join(missing)}",
                hint="install Xcode command line tools and Sparkle's sign_update",
            )
        )

    return Ok(
        ReleasePlan(
            request=request,
            version=version.value,
            paths=paths,
            build_directory=env.config.build_directory,
            app_bundle_name=env.config.app.bundle_name,
        )
    )


def build(env: StageEnv, plan: ReleasePlan, artifacts: Artifacts) -> StageResult:
    stage = ReleaseState.BUILDING
    try:
        recreate_dir(plan.build_directory)
    except OSError as e:
        return Err(_precondition(f"cannot prepare {plan.build_directory}: {e}", stage=stage))

    with env.console.status(f"Archiving {env.config.app.scheme_name}..."):
        archived = env.tools.archive(plan.working_archive_path, plan.request.signing_identity)
    if isinstance(archived, Err):
        return archived.map_err(lambda e: tool_failed(stage, e, "build failed"))

    exported = env.tools.export(plan.working_archive_path, plan.build_directory)
    if isinstance(exported, Err):
        return exported.map_err(lambda e: tool_failed(stage, e, "export failed"))

    app_path = plan.exported_app_path
    if not app_path.exists():
        return Err(
            ReleaseError(
                stage=stage,
                kind="artifact_missing",
                message=f"exported app not found at {app_path}",
                output=exported.value,
            )
        )
    env.console.success(f"built {app_path}")
    return Ok(replace(artifacts, app_path=app_path))


def verify(env: StageEnv, plan: ReleasePlan, artifacts: Artifacts) -> StageResult:
    stage = ReleaseState.VERIFYING
    app = _require_app(plan, artifacts, stage)
    if isinstance(app, Err):
        return app

    checked = env.tools.verify_signature(app.value)
    if isinstance(checked, Err):
        return checked.map_err(lambda e: tool_failed(stage, e, "code signature is not valid"))

    assessed = env.tools.assess(app.value)
    if isinstance(assessed, Err):
        return assessed.map_err(
            lambda e: tool_failed(stage, e, "policy assessment rejected the app")
        )

    env.console.success("code signature valid, execution allowed")
    return Ok(artifacts)


def _rejection(env: StageEnv, verdict: NotarizationVerdict, response: str) -> ReleaseError:
    output = response
    if verdict.submission_id:
        log = env.tools.notarization_log(verdict.submission_id)
        if isinstance(log, Ok):
            output = f"{response.rstrip()}\n{log.value}"
        else:
            output = f"{response.rstrip()}\n{log.error.output}"
    return ReleaseError(
        stage=ReleaseState.NOTARIZING,
        kind="notarization_rejected",
        message=f"notarization failed with status '{verdict.status}': {verdict.message}",
        output=output,
    )


def notarize(env: StageEnv, plan: ReleasePlan, artifacts: Artifacts) -> StageResult:
    stage = ReleaseState.NOTARIZING
    app = _require_app(plan, artifacts, stage)
    if isinstance(app, Err):
        return app

    zipped = env.tools.zip_for_notarization(app.value, plan.notarization_archive_path)
    if isinstance(zipped, Err):
        return zipped.map_err(lambda e: tool_failed(stage, e, "cannot create notarization archive"))

    waiting = f"Waiting for notarization of {plan.paths.notarization_archive_name}..."
    with env.console.status(waiting):
        submitted = env.tools.notarize(plan.notarization_archive_path)

    if isinstance(submitted, Err):
        # notarytool may exit non-zero yet still print a verdict
        verdict = parse_verdict(submitted.error.stdout)
        if isinstance(verdict, Ok) and verdict.value.submission_id and not verdict.value.accepted:
            return Err(_rejection(env, verdict.value, submitted.error.output))
        return submitted.map_err(lambda e: tool_failed(stage, e, "notarization submission failed"))

    verdict = parse_verdict(submitted.value)
    if isinstance(verdict, Err):
        return verdict
    if not verdict.value.accepted:
        return Err(_rejection(env, verdict.value, submitted.value))

    env.console.success(f"notarization accepted ({verdict.value.submission_id or 'no id'})")
    return Ok(artifacts)


def staple(env: StageEnv, plan: ReleasePlan, artifacts: Artifacts) -> StageResult:
    stage = ReleaseState.STAPLING
    app = _require_app(plan, artifacts, stage)
    if isinstance(app, Err):
        return app

    stapled = env.tools.staple(app.value)
    if isinstance(stapled, Err):
        return stapled.map_err(lambda e: tool_failed(stage, e, "stapling failed"))

    env.console.success("notarization ticket stapled")
    return Ok(artifacts)


def archive(env: StageEnv, plan: ReleasePlan, artifacts: Artifacts) -> StageResult:
    stage = ReleaseState.ARCHIVING
    app = _require_app(plan, artifacts, stage)
    if isinstance(app, Err):
        return app

    destination = plan.paths.final_archive_path
    if destination.exists():
        return Err(_precondition(f"archive already exists: {destination}", stage=stage))

    compressed = env.tools.compress(app.value, destination)
    if isinstance(compressed, Err):
        return compressed.map_err(lambda e: tool_failed(stage, e, "archiving failed"))
    if not destination.is_file():
        return Err(
            ReleaseError(
                stage=stage,
                kind="artifact_missing",
                message=f"archive not produced: {destination}",
            )
        )

    env.console.success(f"wrote {destination}")
    return Ok(artifacts)


def sign(env: StageEnv, plan: ReleasePlan, artifacts: Artifacts) -> StageResult:
    stage = ReleaseState.SIGNING
    archive_path = plan.paths.final_archive_path

    signed = env.tools.sign_update(archive_path)
    if isinstance(signed, Err):
        return signed.map_err(lambda e: tool_failed(stage, e, "update signing failed"))

    signature = parse_signature(signed.value, attribute=env.config.signing.signature_attribute)
    if isinstance(signature, Err):
        return signature

    size = archive_path.stat().st_size
    if signature.value.length is not None and signature.value.length != size:
        return Err(
            ReleaseError(
                stage=stage,
                kind="tool_failed",
                message=(
                    f"signing tool reported length {signature.value.length}, "
                    f"archive is {size} bytes"
                ),
                output=signed.value,
            )
        )

    env.console.success("update signature generated")
    return Ok(replace(artifacts, signature=signature.value))


def report(env: StageEnv, plan: ReleasePlan, artifacts: Artifacts) -> StageResult:
    """Compute and print the metadata block for the update feed."""
    if artifacts.signature is None:
        return Err(
            ReleaseError(
                stage=ReleaseState.REPORTING,
                kind="signature_not_found",
                message="no update signature was produced",
            )
        )

    archive_path = plan.paths.final_archive_path
    result = ReleaseReport(
        date=format_release_date(env.now()),
        version=plan.version,
        archive_name=archive_path.name,
        size=archive_path.stat().st_size,
        sha256=sha256_file(archive_path),
        signature=artifacts.signature.value,
    )

    env.console.header("Release metadata")
    for line in render_report(result):
        env.console.print(line)
    env.console.newline()
    env.console.print(render_enclosure(result), Style.RAW)
    return Ok(replace(artifacts, report=result))
