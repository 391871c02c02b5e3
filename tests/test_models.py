import pytest
from pydantic import ValidationError

from indexer_intent.models.resolution_models import MissingKind, ResolutionResult, Turn


class TestResolutionResult:
    def test_ready_requires_query(self):
        with pytest.raises(ValidationError):
            ResolutionResult(message="m", is_ready=True, confidence=0.9)

    def test_ready_rejects_missing(self):
        with pytest.raises(ValidationError):
            ResolutionResult(
                message="m", is_ready=True, confidence=0.9, combined_query="index USDC transfers", missing=["scope"]
            )

    def test_not_ready_requires_missing(self):
        with pytest.raises(ValidationError):
            ResolutionResult(message="m", is_ready=False, confidence=0.2)
        with pytest.raises(ValidationError):
            ResolutionResult(message="m", is_ready=False, confidence=0.2, missing=[])

    def test_not_ready_rejects_query(self):
        with pytest.raises(ValidationError):
            ResolutionResult(
                message="m", is_ready=False, confidence=0.2, combined_query="index", missing=["subject"]
            )

    def test_suggestions_only_rendered_when_present(self):
        result = ResolutionResult(message="m", is_ready=False, confidence=0.4, missing=["subject"])
        assert "suggestions" not in result.to_response()

        result = ResolutionResult(
            message="m", is_ready=False, confidence=0.4, missing=["subject"], suggestions=["USDC transfers"]
        )
        assert result.to_response()["suggestions"] == ["USDC transfers"]


class TestTurn:
    def test_is_immutable(self):
        turn = Turn(role="user", content="hello")
        with pytest.raises(ValidationError):
            turn.content = "changed"

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            Turn(role="system", content="hello")


def test_missing_kind_values():
    assert [kind.value for kind in MissingKind] == ["subject", "action", "scope"]
