"""End-to-end tests for the contract-check harness.

The runtime is faked: it writes the artifact into the session working
directory and streams back a FinalOutput, the way a well-behaved persona would.
"""

import json

import pytest

from contractAgent.contract import OutputContract, SuccessOutput
from contractAgent.personas import Persona, PersonaRegistry, PersonaResolver
from contractAgent.runtime import Budget, CancellationToken, SessionState
from contractAgent.validation import FailureKind, contract_for, run_contract_check
from contractAgent.utils.error_handler import TransportError
from tests.support import FakeRuntime, assistant_text, success_payload


@pytest.fixture
def resolver():
    registry = PersonaRegistry()
    registry.register(Persona(
        id="research-agent-stateful",
        description="Research with file-based output",
        prompt_template="Save the report, return a JSON summary.",
        allowed_tools=frozenset({"WebSearch", "Write", "Read", "WebFetch"}),
        contract=OutputContract(artifact_min_words=2000),
    ))
    registry.register(Persona(
        id="short-form",
        description="Short outputs",
        prompt_template="Be short.",
        contract=OutputContract(
            artifact_field="file",
            required_fields=("file", "summary"),
            artifact_min_words=10,
            artifact_max_words=100,
        ),
    ))
    return PersonaResolver(registry.freeze())


def writing_runtime(tmp_path, artifact="research-outputs/x.md", words=4000, payload=None):
    """FakeRuntime that saves the artifact when the session starts."""

    def save_artifact(invocation):
        path = tmp_path / artifact
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(" ".join(["word"] * words), encoding="utf-8")

    payload = payload if payload is not None else success_payload(artifact)
    return FakeRuntime(events=[assistant_text(json.dumps(payload))], on_start=save_artifact)


class TestRunContractCheck:
    """Session plus validation in one call."""

    @pytest.mark.asyncio
    async def test_compliant_persona_passes(self, tmp_path, resolver, settings):
        runtime = writing_runtime(tmp_path)

        result = await run_contract_check(
            "research-agent-stateful", "Research x", runtime, resolver=resolver, settings=settings
        )

        assert result.passed
        assert result.session.state == SessionState.COMPLETED
        assert result.report.overall_pass
        assert result.report.warnings == []
        assert result.contract.artifact_min_words == 2000
        assert runtime.invocations[0].allowed_tools == frozenset({"WebSearch", "Write", "Read", "WebFetch"})

        typed = result.typed_output()
        assert isinstance(typed, SuccessOutput)
        assert typed.artifact_path == "research-outputs/x.md"

    @pytest.mark.asyncio
    async def test_missing_artifact_fails(self, resolver, settings):
        runtime = FakeRuntime(events=[assistant_text(json.dumps(success_payload("out.md")))])

        result = await run_contract_check(
            "research-agent-stateful", "Research x", runtime, resolver=resolver, settings=settings
        )

        assert not result.passed
        assert result.report.failures == [FailureKind.ARTIFACT_MISSING]
        assert result.typed_output() is None

    @pytest.mark.asyncio
    async def test_persona_contract_is_used(self, tmp_path, resolver, settings):
        runtime = writing_runtime(
            tmp_path,
            artifact="notes.md",
            words=50,
            payload={"file": "notes.md", "summary": "short"},
        )

        result = await run_contract_check("short-form", "Summarize", runtime, resolver=resolver, settings=settings)

        assert result.passed
        assert result.report.artifact_word_count == 50

    @pytest.mark.asyncio
    async def test_unregistered_persona_uses_default_contract(self, tmp_path, resolver, settings):
        runtime = writing_runtime(tmp_path)

        result = await run_contract_check("general-purpose", "Do x", runtime, resolver=resolver, settings=settings)

        assert result.passed
        assert result.session.persona is None
        assert result.contract == OutputContract.from_settings(settings)
        assert runtime.invocations[0].system_prompt is None

    @pytest.mark.asyncio
    async def test_budget_overrides_contract_limits(self, tmp_path, resolver, settings):
        runtime = writing_runtime(tmp_path)

        result = await run_contract_check(
            "research-agent-stateful",
            "Research x",
            runtime,
            resolver=resolver,
            settings=settings,
            budget=Budget(max_duration_seconds=60, max_response_tokens_approx=10),
        )

        assert result.contract.max_output_tokens == 10
        assert result.report.failures == [FailureKind.OUTPUT_TOO_LARGE]

    @pytest.mark.asyncio
    async def test_session_failure_skips_validation(self, resolver, settings):
        runtime = FakeRuntime(events=[assistant_text("{")], error=ConnectionError("connection reset"))

        result = await run_contract_check(
            "research-agent-stateful", "Research x", runtime, resolver=resolver, settings=settings
        )

        assert not result.passed
        assert result.report is None
        assert isinstance(result.session.error, TransportError)
        assert result.typed_output() is None

    @pytest.mark.asyncio
    async def test_default_resolver_loads_registry(self, tmp_path, resolver, settings, mocker):
        load = mocker.patch(
            "contractAgent.validation.harness.load_default_persona_registry",
            return_value=resolver.registry,
        )

        result = await run_contract_check(
            "research-agent-stateful", "Research x", writing_runtime(tmp_path), settings=settings
        )

        load.assert_called_once_with()
        assert result.passed

    @pytest.mark.asyncio
    async def test_cancelled_session(self, tmp_path, resolver, settings):
        token = CancellationToken()
        token.cancel()

        result = await run_contract_check(
            "research-agent-stateful",
            "Research x",
            writing_runtime(tmp_path),
            resolver=resolver,
            settings=settings,
            cancel_token=token,
        )

        assert result.session.state == SessionState.FAILED
        assert result.report is None


class TestContractFor:
    def test_persona_contract_wins(self, settings):
        persona_contract = OutputContract(artifact_dir="mine")
        assert contract_for(persona_contract, settings) is persona_contract

    def test_default_from_settings(self, settings):
        settings.contract.max_output_tokens = 321
        assert contract_for(None, settings).max_output_tokens == 321

    def test_budget_applied(self, settings):
        contract = contract_for(None, settings, Budget(max_duration_seconds=30, max_response_tokens_approx=50))

        assert contract.max_duration_seconds == 30
        assert contract.max_output_tokens == 50
