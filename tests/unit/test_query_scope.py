"""
Test suite for query scoping, store error classification and scoring.

System role: Verification of pure similarity-query helpers
"""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from kb_retrieval.boundary.vdb.base import namespace_for
from kb_retrieval.boundary.vdb.classification import is_transient_store_error
from kb_retrieval.boundary.vdb.filters import QueryScope, resolve_scope, validate_query_vector
from kb_retrieval.boundary.vdb.scoring import cosine_scores, rank
from kb_retrieval.core.exceptions import StoreTransientError, ValidationError


class TestResolveScope:
    """Test suite for filter precedence."""

    def test_namespace_wins_over_every_filter(self) -> None:
        scope = resolve_scope("kb_a", {"kb_id": "b", "client_id": "c"})

        assert scope == QueryScope("namespace", "kb_a")

    def test_kb_filter_wins_over_client_filter(self) -> None:
        assert resolve_scope(None, {"kb_id": "b", "client_id": "c"}) == QueryScope("kb_id", "b")

    def test_client_filter_when_alone(self) -> None:
        assert resolve_scope("", {"client_id": "c"}) == QueryScope("client_id", "c")

    def test_unfiltered_when_no_hints(self) -> None:
        assert resolve_scope(None, None).is_unfiltered

    def test_uuid_values_are_normalised(self) -> None:
        kb = uuid.uuid4()

        assert resolve_scope(None, {"kb_id": kb}).value == str(kb)

    def test_unknown_filter_key_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            resolve_scope(None, {"tenant": "x"})

    @pytest.mark.parametrize("value", ["", "  ", 42, ["a"]])
    def test_malformed_filter_value_is_rejected(self, value) -> None:
        with pytest.raises(ValidationError):
            resolve_scope("kb_a", {"client_id": value})

    def test_scope_matching(self) -> None:
        payload = {"kb_id": "b", "client_id": "c"}

        assert QueryScope("namespace", "kb_a").matches("kb_a", payload)
        assert not QueryScope("namespace", "kb_a").matches("kb_z", payload)
        assert QueryScope("kb_id", "b").matches("anything", payload)
        assert not QueryScope("client_id", "other").matches("kb_a", payload)

    def test_namespace_for_knowledge_base(self) -> None:
        assert namespace_for("1234") == "kb_1234"
        assert namespace_for("1234", prefix="tenant_") == "tenant_1234"

    def test_query_vector_must_be_finite_and_non_empty(self) -> None:
        with pytest.raises(ValidationError):
            validate_query_vector([])
        with pytest.raises(ValidationError):
            validate_query_vector([1.0, float("nan")])


class TestIsTransientStoreError:
    """Test suite for store failure classification."""

    def test_connectivity_loss_is_transient(self) -> None:
        exc = OperationalError("SELECT 1", {}, Exception("server closed the connection unexpectedly"))

        assert is_transient_store_error(exc)

    def test_aborted_transaction_is_transient(self) -> None:
        exc = ProgrammingError(
            "SELECT", {}, Exception("current transaction is aborted, commands ignored")
        )

        assert is_transient_store_error(exc)

    def test_missing_vector_type_is_transient(self) -> None:
        exc = ProgrammingError("SELECT", {}, Exception('type "vector" does not exist'))

        assert is_transient_store_error(exc)

    def test_constraint_violation_is_not_transient(self) -> None:
        exc = IntegrityError("INSERT", {}, Exception("duplicate key value"))

        assert not is_transient_store_error(exc)

    def test_own_transient_error_and_plain_errors(self) -> None:
        assert is_transient_store_error(StoreTransientError("down"))
        assert not is_transient_store_error(ValueError("bug"))


class TestScoring:
    """Test suite for cosine ranking."""

    def test_scores_are_cosine_similarity(self) -> None:
        scores = cosine_scores([1.0, 0.0], [[1.0, 0.0], [0.0, 1.0], [-1.0, 0.0], [0.0, 0.0]])

        assert list(scores) == pytest.approx([1.0, 0.0, -1.0, 0.0])

    def test_rank_orders_by_descending_score_and_applies_threshold(self) -> None:
        ids = ["far", "near", "mid"]
        vectors = [[0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]

        ranked = rank(ids, vectors, [1.0, 0.0], top_k=3, min_score=0.5)

        assert [ids[i] for i, _ in ranked] == ["near", "mid"]
        assert ranked[0][1] == pytest.approx(1.0)

    def test_rank_breaks_ties_by_id(self) -> None:
        ranked = rank(["b", "a"], [[1.0, 0.0], [2.0, 0.0]], [1.0, 0.0], top_k=2)

        assert [i for i, _ in ranked] == [1, 0]
