"""Unit tests for domain models, the department directory and reply parsing."""

import json

import pytest
from pydantic import ValidationError

from helpdesk.departments import DepartmentDirectory, department_context
from helpdesk.departments.directory import UNKNOWN_DEPARTMENT
from helpdesk.llm import extract_json, get_embedding_backend, get_llm_backend, parse_response, reset_llm_backend
from helpdesk.llm.schemas import DetectionResponse
from helpdesk.logging_utils import log_result
from helpdesk.models import DepartmentProfile, DraftResponse, EvaluationResult, Ticket
from tests.conftest import HR_ID, IT_ID


class TestTicket:

    @pytest.mark.unit
    @pytest.mark.parametrize("field", ["title", "description"])
    def test_blank_fields_rejected(self, field):
        data = {"id": "T-1", "title": "Help", "description": "Broken"}
        data[field] = "   "
        with pytest.raises(ValidationError):
            Ticket(**data)

    @pytest.mark.unit
    def test_label_and_snapshot(self, ticket):
        assert ticket.label == "HD-1001"
        snapshot = ticket.metadata_snapshot()
        assert snapshot["title"] == "VPN keeps disconnecting"
        assert snapshot["priority"] == "high"
        assert snapshot["department_name"] is None


class TestResults:

    @pytest.mark.unit
    def test_evaluation_clamps_and_trims(self):
        result = EvaluationResult(
            department_id=IT_ID,
            department_name="IT Support",
            interest_level="87.6",
            confidence_score=None,
            recommended_tags="single",
        )
        assert result.interest_level == 88
        assert result.confidence_score == 0
        assert result.recommended_tags == ["single"]
        assert result.score == 0

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "status, expected",
        [("In Progress", "in_progress"), ("in-progress", "in_progress"), ("closed", "in_progress"), ("PENDING", "pending")],
    )
    def test_draft_status(self, status, expected):
        assert DraftResponse(text="x", confidence=50, suggested_status=status).suggested_status == expected


class TestDepartmentDirectory:

    @pytest.mark.unit
    def test_requires_departments(self):
        with pytest.raises(ValueError):
            DepartmentDirectory([])

    @pytest.mark.unit
    def test_default_falls_back_to_first(self):
        directory = DepartmentDirectory([{"id": HR_ID, "name": "HR"}], default_name="IT Support")
        assert directory.default.name == "HR"

    @pytest.mark.unit
    def test_lookups(self, directory):
        assert directory.by_name(" hr ").id == HR_ID
        assert directory.by_name("Legal") is None
        assert directory.name_for_id(IT_ID) == "IT Support"
        assert directory.name_for_id("nope") == UNKNOWN_DEPARTMENT
        assert directory.is_valid_id(IT_ID)
        assert not directory.is_valid_id("33333333-3333-4333-8333-000000000000")
        assert not directory.is_valid_id(None)

    @pytest.mark.unit
    def test_context_prefers_responsibility(self):
        custom = DepartmentProfile(id=IT_ID, name="IT Support", responsibility="  Laptops only. ")
        assert department_context(custom) == "Laptops only."
        assert "IT Department Agent" in department_context(DepartmentProfile(id=IT_ID, name="it support"))


class TestReplyParsing:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('{"a": 1}', '{"a": 1}'),
            ('```json\n{"a": 1}\n```', '{"a": 1}'),
            ('Sure, here you go: {"a": {"b": 2}} hope it helps', '{"a": {"b": 2}}'),
            ("no json here", None),
            ("", None),
        ],
    )
    def test_extract_json(self, raw, expected):
        assert extract_json(raw) == expected

    @pytest.mark.unit
    def test_parse_response(self):
        parsed = parse_response('{"is_detected": true, "rationale": "x"}', DetectionResponse)
        assert parsed.is_detected is True
        assert parse_response('{"rationale": "x"}', DetectionResponse) is None
        assert parse_response("{not json}", DetectionResponse) is None


class TestBackendFactory:

    @pytest.fixture(autouse=True)
    def _fresh(self):
        reset_llm_backend()
        yield
        reset_llm_backend()

    @pytest.mark.unit
    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("LLM_BACKEND", "carrier-pigeon")
        with pytest.raises(ValueError):
            get_llm_backend()

    @pytest.mark.unit
    def test_unknown_embedding_backend(self, monkeypatch):
        monkeypatch.setenv("EMBEDDING_BACKEND", "abacus")
        with pytest.raises(ValueError):
            get_embedding_backend()

    @pytest.mark.unit
    def test_backend_choice_is_read_at_call_time(self, monkeypatch):
        monkeypatch.setenv("LLM_BACKEND", "groq")
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        with pytest.raises(ValueError, match="GROQ_API_KEY"):
            get_llm_backend()


class TestResultLog:

    @pytest.mark.unit
    def test_appends_json_lines(self, tmp_path):
        path = tmp_path / "out" / "runs.jsonl"
        log_result({"n": 1}, path)
        log_result({"n": 2, "path": tmp_path}, path)
        lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
        assert [line["n"] for line in lines] == [1, 2]
        assert lines[1]["path"] == str(tmp_path)
