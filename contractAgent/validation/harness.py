"""Contract-check harness.

Runs one persona end to end and checks the file-based output protocol:
1. the persona returns a JSON summary only, within the token ceiling
2. the full work product is saved to the artifact file
3. the artifact is readable and roughly the expected size
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from contractAgent.config.settings import Settings, get_settings
from contractAgent.contract.models import FinalOutput, parse_final_output
from contractAgent.contract.schema import OutputContract
from contractAgent.personas.resolver import PersonaResolver
from contractAgent.personas.scanner import load_default_persona_registry
from contractAgent.runtime.interfaces import CancellationToken, RuntimeClient
from contractAgent.runtime.session import Budget, ExecutionRequest, ExecutionSession, SessionResult
from contractAgent.utils.logging_utils import log_validation_report

from .report import ValidationReport
from .validator import validate

LOGGER = logging.getLogger(__name__)


@dataclass
class HarnessResult:
    """Session result plus its validation report.

    report is None when the session itself failed: no partial output is
    validated.
    """

    persona_id: str
    session: SessionResult
    report: Optional[ValidationReport] = None
    contract: Optional[OutputContract] = None

    @property
    def passed(self) -> bool:
        return self.session.succeeded and self.report is not None and self.report.overall_pass

    def typed_output(self) -> Optional[FinalOutput]:
        """Typed FinalOutput for a passing run, else None.

        Raises:
            pydantic.ValidationError: Field values have the wrong types
        """
        if not self.passed or self.report.parsed is None:
            return None
        return parse_final_output(self.report.parsed)


def contract_for(
    persona_contract: Optional[OutputContract],
    settings: Settings,
    budget: Optional[Budget] = None,
) -> OutputContract:
    """Contract to validate against: the persona's own, else the configured
    default, with the request budget applied on top."""
    contract = persona_contract or OutputContract.from_settings(settings)
    if budget is not None:
        contract = replace(
            contract,
            max_duration_seconds=budget.max_duration_seconds,
            max_output_tokens=budget.max_response_tokens_approx,
        )
    return contract


async def run_contract_check(
    persona_id: str,
    instruction: str,
    runtime: RuntimeClient,
    *,
    resolver: PersonaResolver = None,
    settings: Settings = None,
    budget: Optional[Budget] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> HarnessResult:
    """Run one persona and validate its output contract.

    Args:
        persona_id: Persona to invoke
        instruction: User instruction for the persona
        runtime: Runtime client
        resolver: Persona resolver (default: registry from personas.yaml)
        settings: Settings (default: get_settings())
        budget: Request budget; defaults to the persona's contract limits
        cancel_token: Caller-side cancellation

    Returns:
        HarnessResult
    """
    settings = settings or get_settings()
    resolver = resolver or PersonaResolver(load_default_persona_registry())

    persona = resolver.resolve(persona_id)
    persona_contract = persona.contract if persona else None
    if budget is None:
        default_contract = contract_for(persona_contract, settings)
        budget = Budget(
            max_duration_seconds=default_contract.max_duration_seconds,
            max_response_tokens_approx=default_contract.max_output_tokens,
        )
    contract = contract_for(persona_contract, settings, budget)

    request = ExecutionRequest(persona_id=persona_id, user_instruction=instruction, budget=budget)
    session = ExecutionSession(request, resolver, runtime, settings=settings)
    session_result = await session.run(cancel_token=cancel_token)

    if not session_result.succeeded:
        LOGGER.error(
            f"Contract check for '{persona_id}' aborted: session failed after "
            f"{session_result.elapsed_seconds:.2f}s: {session_result.error}"
        )
        return HarnessResult(persona_id=persona_id, session=session_result, contract=contract)

    report = validate(
        session_result.final_output,
        session_result.elapsed_seconds,
        contract=contract,
        base_dir=settings.runtime.working_dir,
    )
    log_validation_report(LOGGER, report, persona_id=persona_id)

    return HarnessResult(
        persona_id=persona_id,
        session=session_result,
        report=report,
        contract=contract,
    )


__all__ = ["HarnessResult", "contract_for", "run_contract_check"]
