"""Unit tests for the FinalOutput validator."""

import json

import pytest

from contractAgent.contract import OutputContract, SuccessOutput
from contractAgent.validation import (
    Criterion,
    CriterionStatus,
    FailureKind,
    resolve_artifact_path,
    validate,
)
from tests.support import success_payload

SCENARIO_OUTPUT = (
    '{"status":"success","artifactPath":"out.md","topic":"x","sourcesCount":5,'
    '"wordCount":4000,"keyFindings":["a","b"]}'
)


def output_of_length(length, artifact_path="out.md"):
    """Valid success FinalOutput padded to exactly ``length`` characters."""
    payload = success_payload(artifact_path)
    pad = length - len(json.dumps(payload))
    assert pad >= 0
    payload["keyFindings"][0] += "x" * pad
    text = json.dumps(payload)
    assert len(text) == length
    return text


def partial_output(**overrides):
    payload = {
        "status": "partial",
        "topic": "x",
        "message": "Time budget reached; saved progress",
        "sourcesCount": 2,
        "wordCount": 800,
    }
    payload.update(overrides)
    return json.dumps(payload)


class TestValidOutput:
    """Outputs that satisfy the contract."""

    def test_valid_output_passes_without_warnings(self, tmp_path, write_artifact, success_output):
        write_artifact("out.md", words=4000)

        report = validate(success_output("out.md"), 10.0, base_dir=tmp_path)

        assert report.overall_pass
        assert report.failures == []
        assert report.warnings == []
        assert report.missing_fields == ()
        assert report.artifact_word_count == 4000
        assert report.output_status == "success"
        assert all(result.status == CriterionStatus.PASS for result in report.criteria.values())

    def test_documented_scenario(self, tmp_path, write_artifact):
        write_artifact("out.md", words=4000)

        report = validate(SCENARIO_OUTPUT, 30.0, base_dir=tmp_path)

        assert report.overall_pass
        assert report.warnings == []

    def test_documented_scenario_without_artifact(self, tmp_path):
        report = validate(SCENARIO_OUTPUT, 30.0, base_dir=tmp_path)

        assert not report.overall_pass
        assert report.failures == [FailureKind.ARTIFACT_MISSING]

    def test_serialized_model_passes(self, tmp_path, write_artifact):
        write_artifact("out.md")
        output = SuccessOutput(
            topic="x", artifact_path="out.md", sources_count=3, word_count=4000, key_findings=["k"]
        )

        report = validate(output.to_json(), 1.0, base_dir=tmp_path)
        assert report.overall_pass

    def test_surrounding_whitespace_is_ignored(self, tmp_path, write_artifact, success_output):
        write_artifact("out.md")

        report = validate("\n  " + success_output("out.md") + "\n", 1.0, base_dir=tmp_path)
        assert report.overall_pass

    def test_absolute_artifact_path(self, tmp_path, write_artifact, success_output):
        path = write_artifact("nested/report.md")

        report = validate(success_output(str(path)), 1.0)
        assert report.overall_pass
        assert report.artifact_path == str(path)


class TestFailures:
    """Each hard violation is reported by kind."""

    def test_missing_artifact(self, tmp_path, success_output):
        report = validate(success_output("out.md"), 10.0, base_dir=tmp_path)

        assert not report.overall_pass
        assert report.failures == [FailureKind.ARTIFACT_MISSING]
        assert report.status_of(Criterion.ARTIFACT_SIZE) == CriterionStatus.SKIPPED

    def test_malformed_output(self, tmp_path):
        report = validate("not json", 10.0, base_dir=tmp_path)

        assert not report.overall_pass
        assert report.failures == [FailureKind.MALFORMED_OUTPUT]
        assert report.status_of(Criterion.SCHEMA) == CriterionStatus.SKIPPED
        assert report.status_of(Criterion.ARTIFACT_EXISTS) == CriterionStatus.SKIPPED
        assert report.parsed is None

    @pytest.mark.parametrize("text", ["[1, 2, 3]", '"just a string"', "42", "null"])
    def test_json_that_is_not_an_object(self, tmp_path, text):
        report = validate(text, 1.0, base_dir=tmp_path)
        assert report.failures == [FailureKind.MALFORMED_OUTPUT]

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_output(self, tmp_path, text):
        report = validate(text, 1.0, base_dir=tmp_path)

        assert report.failures == [FailureKind.MALFORMED_OUTPUT]
        assert report.estimated_tokens == 0

    def test_missing_fields_reported_together(self, tmp_path, write_artifact):
        write_artifact("out.md")
        payload = success_payload("out.md")
        del payload["wordCount"]
        del payload["keyFindings"]

        report = validate(json.dumps(payload), 1.0, base_dir=tmp_path)

        assert report.failures == [FailureKind.MISSING_FIELDS]
        assert report.missing_fields == ("wordCount", "keyFindings")

    def test_failures_listed_in_evaluation_order(self, tmp_path):
        text = "not json " + "x" * 2500

        report = validate(text, 1.0, base_dir=tmp_path)
        assert report.failures == [FailureKind.MALFORMED_OUTPUT, FailureKind.OUTPUT_TOO_LARGE]

    def test_deeply_nested_json_is_malformed(self, tmp_path):
        text = "[" * 100000 + "]" * 100000

        report = validate(text, 1.0, base_dir=tmp_path)

        assert report.failures == [FailureKind.MALFORMED_OUTPUT, FailureKind.OUTPUT_TOO_LARGE]
        assert report.parsed is None

    def test_unreachable_artifact_path_is_reported(self, tmp_path):
        payload = success_payload("a" * 300 + ".md")

        report = validate(json.dumps(payload), 1.0, base_dir=tmp_path)

        assert not report.overall_pass
        assert report.failures == [FailureKind.ARTIFACT_MISSING]
        assert report.status_of(Criterion.ARTIFACT_SIZE) == CriterionStatus.SKIPPED


class TestSizeCeiling:
    """Estimated tokens must stay within the ceiling."""

    def test_2000_characters_pass(self, tmp_path, write_artifact):
        write_artifact("out.md")

        report = validate(output_of_length(2000), 1.0, base_dir=tmp_path)

        assert report.estimated_tokens == 500
        assert report.overall_pass

    def test_2001_characters_fail(self, tmp_path, write_artifact):
        write_artifact("out.md")

        report = validate(output_of_length(2001), 1.0, base_dir=tmp_path)

        assert report.estimated_tokens == 501
        assert report.failures == [FailureKind.OUTPUT_TOO_LARGE]

    def test_ceiling_follows_contract(self, tmp_path, write_artifact):
        write_artifact("out.md")
        contract = OutputContract(max_output_tokens=100)

        report = validate(output_of_length(401), 1.0, contract=contract, base_dir=tmp_path)
        assert report.failures == [FailureKind.OUTPUT_TOO_LARGE]


class TestWarnings:
    """Soft criteria are flagged but never fail the run."""

    @pytest.mark.parametrize("words", [100, 7000])
    def test_artifact_outside_word_band(self, tmp_path, write_artifact, success_output, words):
        write_artifact("out.md", words=words)

        report = validate(success_output("out.md"), 1.0, base_dir=tmp_path)

        assert report.overall_pass
        assert report.status_of(Criterion.ARTIFACT_SIZE) == CriterionStatus.WARN
        assert len(report.warnings) == 1
        assert report.artifact_word_count == words

    def test_over_time_budget(self, tmp_path, write_artifact, success_output):
        write_artifact("out.md")

        report = validate(success_output("out.md"), 700.0, base_dir=tmp_path)

        assert report.overall_pass
        assert report.status_of(Criterion.DURATION) == CriterionStatus.WARN
        assert report.warnings[0].startswith("duration: ")


class TestPartialOutput:
    """The degraded "partial" shape has its own field set."""

    def test_partial_without_artifact_passes(self, tmp_path):
        report = validate(partial_output(), 610.0, base_dir=tmp_path)

        assert report.overall_pass
        assert report.output_status == "partial"
        assert report.status_of(Criterion.ARTIFACT_EXISTS) == CriterionStatus.SKIPPED

    def test_partial_missing_message(self, tmp_path):
        payload = json.loads(partial_output())
        del payload["message"]

        report = validate(json.dumps(payload), 1.0, base_dir=tmp_path)
        assert report.missing_fields == ("message",)

    def test_partial_naming_an_absent_artifact_fails(self, tmp_path):
        report = validate(partial_output(artifactPath="half.md"), 1.0, base_dir=tmp_path)
        assert report.failures == [FailureKind.ARTIFACT_MISSING]


class TestArtifactPath:
    """Where the validator looks for the artifact."""

    def test_override_replaces_named_path(self, tmp_path, write_artifact, success_output):
        actual = write_artifact("elsewhere.md")

        report = validate(success_output("out.md"), 1.0, artifact_path_override=actual, base_dir=tmp_path)

        assert report.overall_pass
        assert report.artifact_path == str(actual)

    def test_path_derived_from_topic(self, tmp_path, write_artifact):
        write_artifact("research-outputs/x.md")
        payload = success_payload()
        del payload["artifactPath"]

        report = validate(json.dumps(payload), 1.0, base_dir=tmp_path)

        # The artifact is found, but the field is still required
        assert report.status_of(Criterion.ARTIFACT_EXISTS) == CriterionStatus.PASS
        assert report.failures == [FailureKind.MISSING_FIELDS]
        assert report.missing_fields == ("artifactPath",)

    def test_no_path_and_no_topic(self, tmp_path):
        report = validate(json.dumps({"status": "success"}), 1.0, base_dir=tmp_path)

        assert FailureKind.ARTIFACT_MISSING in report.failures
        assert FailureKind.MISSING_FIELDS in report.failures

    def test_resolve_relative_path(self, tmp_path):
        path = resolve_artifact_path({"artifactPath": "a/b.md"}, OutputContract(), base_dir=tmp_path)
        assert path == tmp_path / "a" / "b.md"

    def test_custom_artifact_field(self, tmp_path, write_artifact):
        write_artifact("notes.md", words=500)
        contract = OutputContract(
            artifact_field="file",
            required_fields=("file", "summary", "sourcesCount"),
            artifact_min_words=300,
        )
        text = json.dumps({"file": "notes.md", "summary": "s", "sourcesCount": 3})

        report = validate(text, 1.0, contract=contract, base_dir=tmp_path)

        assert report.overall_pass
        assert report.warnings == []


class TestReport:
    def test_validation_is_idempotent(self, tmp_path, write_artifact, success_output):
        write_artifact("out.md", words=100)
        text = success_output("out.md")

        first = validate(text, 5.0, base_dir=tmp_path)
        second = validate(text, 5.0, base_dir=tmp_path)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_to_dict(self, tmp_path, success_output):
        report = validate(success_output("out.md"), 1.0, base_dir=tmp_path)
        data = report.to_dict()

        assert data["overallPass"] is False
        assert data["failures"] == ["ArtifactMissing"]
        assert data["criteria"]["parseable"] == "pass"
        assert data["criteria"]["artifact_size"] == "skipped"
        assert list(data["criteria"]) == [
            "parseable", "size", "artifact_exists", "artifact_size", "schema", "duration",
        ]
